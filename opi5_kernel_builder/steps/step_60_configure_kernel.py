from __future__ import annotations

import logging

from ..build_config import BuildConfig
from ..errors import StepFailed
from ..lib.assets import append_lines
from ..lib.manifests import kernel_config_fragment
from ..pipeline import BuildCtx, Policy

logger = logging.getLogger(__name__)


class ConfigureKernelStep:
    step_id = "60_configure_kernel"
    policy = Policy.FATAL

    def enabled(self, cfg: BuildConfig) -> bool:
        return True

    def run(self, ctx: BuildCtx) -> None:
        ctx.log.info("Configuring kernel with Mali GPU support...")
        cfg = ctx.cfg
        logger.debug("Kernel environment: %s", cfg.kernel_env)

        if cfg.clean_build:
            ctx.log.info("Cleaning previous build artifacts...")
            if not ctx.run_make("mrproper").ok:
                ctx.log.warning("Failed to clean build artifacts")

        if not ctx.run_make(cfg.defconfig).ok:
            ctx.log.warning("Failed to use specific defconfig, trying generic...")
            if not ctx.run_make("defconfig").ok:
                raise StepFailed("Failed to configure kernel")

        ctx.log.info("Enabling RK3588, Mali GPU, and hardware acceleration configurations...")
        fragment = kernel_config_fragment()
        try:
            append_lines(cfg.kernel_dir / ".config", fragment, dry_run=cfg.dry_run)
        except OSError as e:
            ctx.log.warning("Failed to append board configuration to .config (%s)", e)

        if not ctx.run_make("olddefconfig").ok:
            ctx.log.warning("Failed to resolve config dependencies")

        ctx.log.success("Kernel configured successfully with Mali GPU support")
