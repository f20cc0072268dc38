from __future__ import annotations

import logging
from typing import List

from ..build_config import BuildConfig
from ..lib.manifests import load_sources_manifest
from ..pipeline import BuildCtx, Policy

logger = logging.getLogger(__name__)


def shallow_clone_argv(url: str, dest: str, *, branch: str | None = None) -> List[str]:
    argv = ["git", "clone", "--depth", "1"]
    if branch:
        argv += ["--branch", branch]
    return [*argv, url, dest]


def mainline_tag(kernel_version: str) -> str:
    return f"v{kernel_version}"


class FetchKernelSourceStep:
    """Clone the vendor kernel fork, falling back to mainline at ``v<version>``."""

    step_id = "50_fetch_kernel_source"
    policy = Policy.FATAL

    def enabled(self, cfg: BuildConfig) -> bool:
        return True

    def run(self, ctx: BuildCtx) -> None:
        ctx.log.info("Downloading kernel source...")
        sources = load_sources_manifest()["kernel"]
        build_dir = ctx.cfg.build_dir
        dest = ctx.cfg.kernel_dir.name

        primary = sources["primary"]
        r = ctx.run(shallow_clone_argv(primary["url"], dest, branch=primary["branch"]), cwd=build_dir)
        if not r.ok:
            ctx.log.warning("Failed to clone Ubuntu Rockchip kernel, trying mainline...")
            mainline = sources["mainline"]
            ctx.require(
                shallow_clone_argv(mainline["url"], dest, branch=mainline_tag(ctx.cfg.kernel_version)),
                "Failed to download kernel source",
                cwd=build_dir,
            )

        ctx.log.success("Kernel source downloaded successfully")

        ctx.log.info("Downloading Ubuntu Rockchip patches...")
        patches = sources["patches"]
        if ctx.attempt(
            shallow_clone_argv(patches["url"], patches["dest"]),
            "Failed to download Ubuntu Rockchip patches",
            cwd=build_dir,
        ):
            ctx.log.success("Ubuntu Rockchip patches downloaded")
