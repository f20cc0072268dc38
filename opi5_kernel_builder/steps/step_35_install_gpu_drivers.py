from __future__ import annotations

import logging

from ..build_config import BuildConfig
from ..errors import StepFailed
from ..lib.assets import install_file, relink
from ..lib.mali import MaliLayout
from ..pipeline import BuildCtx, Policy

logger = logging.getLogger(__name__)


class InstallGpuDriversStep:
    step_id = "35_install_gpu_drivers"
    policy = Policy.FATAL

    def enabled(self, cfg: BuildConfig) -> bool:
        return cfg.install_gpu_blobs

    def run(self, ctx: BuildCtx) -> None:
        ctx.log.info("Installing Mali G610 drivers and firmware...")
        mali = MaliLayout.for_paths(ctx.paths)
        dry_run = ctx.cfg.dry_run

        try:
            install_file(mali.downloaded(mali.firmware), mali.firmware_path, dry_run=dry_run)
        except OSError as e:
            raise StepFailed(f"Failed to install Mali firmware ({e})") from e

        try:
            install_file(mali.downloaded(mali.driver), mali.driver_path, dry_run=dry_run)
        except OSError as e:
            raise StepFailed(f"Failed to install Mali userspace driver ({e})") from e

        ctx.log.info("Creating Mali driver symbolic links...")
        for link, target in mali.link_table():
            try:
                relink(target, link, dry_run=dry_run)
            except OSError as e:
                ctx.log.warning("Failed to create Mali symbolic link %s (%s)", link, e)

        if ctx.cfg.enable_vulkan:
            self._install_vulkan_variant(ctx, mali)

        ctx.attempt(["ldconfig"], "Failed to update library cache")

        ctx.log.success("Mali drivers installed successfully")

    def _install_vulkan_variant(self, ctx: BuildCtx, mali: MaliLayout) -> None:
        src = mali.downloaded(mali.vulkan_driver)
        if not ctx.cfg.dry_run and not src.is_file():
            logger.info("Mali Vulkan driver not downloaded; using standard driver")
            return

        ctx.log.info("Installing Mali Vulkan driver...")
        try:
            install_file(src, mali.vulkan_driver_path, dry_run=ctx.cfg.dry_run)
        except OSError as e:
            ctx.log.warning("Failed to install Mali Vulkan driver (%s)", e)
            return

        try:
            relink(mali.vulkan_driver_path, mali.vulkan_link_path, dry_run=ctx.cfg.dry_run)
        except OSError as e:
            ctx.log.warning("Failed to create Mali Vulkan link %s (%s)", mali.vulkan_link_path, e)
