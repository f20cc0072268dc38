from __future__ import annotations

import logging
import os
import platform
import shutil
from pathlib import Path

from ..build_config import BuildConfig
from ..errors import StepFailed
from ..pipeline import BuildCtx, Policy

logger = logging.getLogger(__name__)

TESTED_MACHINES = {"aarch64", "x86_64"}
MIN_FREE_BYTES = 10 * 1024 * 1024 * 1024


class PreflightStep:
    """Host sanity checks. Only missing root privileges is fatal."""

    step_id = "05_preflight"
    policy = Policy.FATAL

    def enabled(self, cfg: BuildConfig) -> bool:
        return True

    def run(self, ctx: BuildCtx) -> None:
        if not Path(ctx.paths.debian_version).exists():
            ctx.log.warning("This tool is designed for Ubuntu/Debian systems (%s missing)", ctx.paths.debian_version)

        machine = platform.machine()
        if machine not in TESTED_MACHINES:
            ctx.log.warning("Untested architecture detected: %s", machine)

        try:
            free = shutil.disk_usage(ctx.paths.disk_check_dir).free
        except OSError as e:
            logger.debug("Disk space check skipped: %s", e)
        else:
            if free < MIN_FREE_BYTES:
                ctx.log.warning(
                    "Less than 10GB free space available in %s (%.1f GiB)",
                    ctx.paths.disk_check_dir,
                    free / 1024**3,
                )

        if ctx.cfg.dry_run:
            logger.info("Dry run: root privilege check skipped")
            return

        if os.geteuid() != 0:
            raise StepFailed("This tool requires root privileges. Please run with sudo.")
