from __future__ import annotations

import logging
from pathlib import Path

from ..build_config import BuildConfig
from ..errors import StepFailed
from ..lib.mali import MaliLayout
from ..pipeline import BuildCtx, Policy

logger = logging.getLogger(__name__)

VENDOR_MARKER = "mali"

# (API, descriptor attribute on MaliLayout, diagnostic tool)
API_PROBES = (
    ("OpenCL", "opencl_icd_path", "clinfo"),
    ("Vulkan", "vulkan_icd_path", "vulkaninfo"),
)


class VerifyGpuStep:
    """Post-install sanity check; failing it never fails the build."""

    step_id = "85_verify_gpu"
    policy = Policy.BEST_EFFORT

    def enabled(self, cfg: BuildConfig) -> bool:
        return cfg.verify_gpu and cfg.install_gpu_blobs and not cfg.no_install

    def run(self, ctx: BuildCtx) -> None:
        ctx.log.info("Verifying Mali GPU installation...")
        mali = MaliLayout.for_paths(ctx.paths)

        if not mali.firmware_path.exists():
            raise StepFailed("Mali firmware not found")
        if not mali.driver_path.exists():
            raise StepFailed("Mali driver library not found")

        for api, attr, tool in API_PROBES:
            descriptor: Path = getattr(mali, attr)
            if not descriptor.exists():
                logger.debug("%s descriptor %s absent; not probing", api, descriptor)
                continue

            ctx.log.info("Testing %s functionality...", api)
            r = ctx.run([tool])
            if r.ok and VENDOR_MARKER in r.stdout.lower():
                ctx.log.success("%s Mali support detected", api)
            else:
                ctx.log.warning("%s Mali support not detected (may need reboot)", api)

        ctx.log.success("GPU installation verification completed")
