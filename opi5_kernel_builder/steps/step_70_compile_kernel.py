from __future__ import annotations

import logging

from ..build_config import BuildConfig
from ..errors import StepFailed
from ..pipeline import BuildCtx, Policy

logger = logging.getLogger(__name__)

# (make target, what failed)
BUILD_TARGETS = (
    ("Image", "kernel image"),
    ("dtbs", "device tree blobs"),
    ("modules", "kernel modules"),
)


class CompileKernelStep:
    step_id = "70_compile_kernel"
    policy = Policy.FATAL

    def enabled(self, cfg: BuildConfig) -> bool:
        return True

    def run(self, ctx: BuildCtx) -> None:
        ctx.log.info("Building kernel with Mali GPU support (this may take a while)...")

        for target, what in BUILD_TARGETS:
            if not ctx.run_make(target, jobs=True).ok:
                raise StepFailed(f"Failed to build {what}")

        ctx.log.success("Kernel built successfully with Mali GPU support")
