from __future__ import annotations

import logging
from pathlib import Path

from ..build_config import BuildConfig
from ..errors import StepFailed
from ..lib.assets import install_file
from ..pipeline import BuildCtx, Policy

logger = logging.getLogger(__name__)


def boot_artifacts(cfg: BuildConfig, boot_dir: str) -> list[tuple[Path, Path, bool]]:
    """(source, destination, fatal) for each file copied into /boot."""

    src = cfg.kernel_dir
    boot = Path(boot_dir)
    release = cfg.kernel_release
    return [
        (src / "arch" / cfg.arch / "boot" / "Image", boot / f"vmlinuz-{release}", True),
        (src / "System.map", boot / f"System.map-{release}", False),
        (src / ".config", boot / f"config-{release}", False),
    ]


class InstallKernelStep:
    step_id = "80_install_kernel"
    policy = Policy.FATAL

    def enabled(self, cfg: BuildConfig) -> bool:
        return not cfg.no_install

    def run(self, ctx: BuildCtx) -> None:
        ctx.log.info("Installing kernel and Mali GPU modules...")
        cfg = ctx.cfg

        if not ctx.run_make("modules_install").ok:
            raise StepFailed("Failed to install kernel modules")

        if not ctx.run_make("dtbs_install").ok:
            ctx.log.warning("Failed to install device tree blobs")

        for src, dst, fatal in boot_artifacts(cfg, ctx.paths.boot_dir):
            try:
                install_file(src, dst, dry_run=cfg.dry_run)
            except OSError as e:
                if fatal:
                    raise StepFailed(f"Failed to copy kernel image ({e})") from e
                ctx.log.warning("Failed to copy %s (%s)", src.name, e)

        ctx.attempt(
            ["update-initramfs", "-c", "-k", cfg.kernel_release],
            "Failed to update initramfs",
        )
        ctx.attempt(["u-boot-update"], "Failed to update u-boot configuration")

        ctx.log.success("Kernel installed successfully with Mali GPU support")
