from __future__ import annotations

import logging
from pathlib import Path

from ..build_config import BuildConfig
from ..errors import StepFailed
from ..pipeline import BuildCtx, Policy

logger = logging.getLogger(__name__)


class PrepareEnvironmentStep:
    step_id = "10_prepare_environment"
    policy = Policy.FATAL

    def enabled(self, cfg: BuildConfig) -> bool:
        return True

    def run(self, ctx: BuildCtx) -> None:
        ctx.log.info("Setting up build environment...")

        build_dir = Path(ctx.cfg.build_dir)
        if ctx.cfg.dry_run:
            logger.info("Would create %s", build_dir)
        else:
            try:
                build_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StepFailed(f"Failed to create directory: {build_dir} ({e})") from e

        ctx.require(["apt", "update"], "Failed to update package lists")

        ctx.log.success("Build environment setup completed")
