from __future__ import annotations

import logging
from pathlib import Path

from ..build_config import BuildConfig
from ..errors import StepFailed
from ..lib.mali import Blob, MaliLayout
from ..pipeline import BuildCtx, Policy

logger = logging.getLogger(__name__)


def wget_argv(blob: Blob, dest: Path) -> list[str]:
    return ["wget", "-O", str(dest), blob.url]


class FetchGpuBlobsStep:
    """Download the Mali G610 firmware and userspace driver blobs."""

    step_id = "30_fetch_gpu_blobs"
    policy = Policy.FATAL

    def enabled(self, cfg: BuildConfig) -> bool:
        return cfg.install_gpu_blobs

    def run(self, ctx: BuildCtx) -> None:
        ctx.log.info("Downloading Mali G610 GPU blobs and libraries...")
        mali = MaliLayout.for_paths(ctx.paths)

        blob_dir = Path(ctx.paths.blob_dir)
        if not ctx.cfg.dry_run:
            try:
                blob_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StepFailed(f"Failed to create directory: {blob_dir} ({e})") from e

        ctx.log.info("Downloading Mali CSF firmware...")
        ctx.require(
            wget_argv(mali.firmware, mali.downloaded(mali.firmware)),
            "Failed to download Mali firmware",
            cwd=blob_dir,
        )

        ctx.log.info("Downloading Mali userspace driver...")
        ctx.require(
            wget_argv(mali.driver, mali.downloaded(mali.driver)),
            "Failed to download Mali userspace driver",
            cwd=blob_dir,
        )

        if ctx.cfg.enable_vulkan:
            ctx.log.info("Downloading Mali Vulkan-enabled driver...")
            ctx.attempt(
                wget_argv(mali.vulkan_driver, mali.downloaded(mali.vulkan_driver)),
                "Failed to download Mali Vulkan driver, using standard version",
                cwd=blob_dir,
            )

        ctx.log.info("Downloading additional Mali components...")
        extras = mali.extras
        ctx.attempt(
            ["git", "clone", "--depth", "1", "--branch", extras["branch"], extras["url"], extras["dest"]],
            "Failed to download additional Mali components",
            cwd=blob_dir,
        )

        ctx.log.success("Mali GPU blobs downloaded successfully")
