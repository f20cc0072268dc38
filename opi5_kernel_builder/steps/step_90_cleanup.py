from __future__ import annotations

import logging

from ..build_config import BuildConfig
from ..lib.assets import remove_tree
from ..pipeline import BuildCtx, Policy

logger = logging.getLogger(__name__)


class CleanupStep:
    step_id = "90_cleanup"
    policy = Policy.BEST_EFFORT

    def enabled(self, cfg: BuildConfig) -> bool:
        return cfg.cleanup

    def run(self, ctx: BuildCtx) -> None:
        ctx.log.info("Cleaning up build artifacts...")

        for what, path in (
            ("build directory", ctx.cfg.build_dir),
            ("Mali install directory", ctx.paths.blob_dir),
        ):
            try:
                remove_tree(path, dry_run=ctx.cfg.dry_run)
            except OSError as e:
                ctx.log.warning("Failed to cleanup %s %s (%s)", what, path, e)

        ctx.log.success("Cleanup completed")
