from __future__ import annotations

import logging

from ..build_config import BuildConfig
from ..errors import StepFailed
from ..lib.assets import write_text_file
from ..lib.mali import MaliLayout
from ..pipeline import BuildCtx, Policy

logger = logging.getLogger(__name__)


def render_opencl_icd(library_path: str) -> str:
    return f"{library_path}\n"


class EnableOpenCLStep:
    step_id = "40_enable_opencl"
    policy = Policy.FATAL

    def enabled(self, cfg: BuildConfig) -> bool:
        return cfg.install_gpu_blobs and cfg.enable_opencl

    def run(self, ctx: BuildCtx) -> None:
        ctx.log.info("Setting up OpenCL support for Mali G610...")
        mali = MaliLayout.for_paths(ctx.paths)

        try:
            write_text_file(
                mali.opencl_icd_path,
                render_opencl_icd(str(mali.driver_path)),
                mode=0o644,
                dry_run=ctx.cfg.dry_run,
            )
        except OSError as e:
            raise StepFailed(f"Failed to create Mali OpenCL ICD file ({e})") from e

        ctx.log.success("OpenCL support configured successfully")
