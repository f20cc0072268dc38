from __future__ import annotations

import logging
import platform
from typing import List, Sequence

from ..build_config import BuildConfig
from ..lib.manifests import host_packages
from ..pipeline import BuildCtx, Policy

logger = logging.getLogger(__name__)


def apt_install_argv(packages: Sequence[str]) -> List[str]:
    return ["apt", "install", "-y", *packages]


def build_dep_argv(running_release: str) -> List[str]:
    return ["apt", "build-dep", "-y", "linux", f"linux-image-unsigned-{running_release}"]


class InstallDependenciesStep:
    step_id = "20_install_dependencies"
    policy = Policy.FATAL

    def enabled(self, cfg: BuildConfig) -> bool:
        return True

    def run(self, ctx: BuildCtx) -> None:
        ctx.log.info("Installing build prerequisites...")

        packages = host_packages()
        logger.debug("Installing %d packages in one batch", len(packages))
        ctx.require(
            apt_install_argv(packages),
            "Failed to install prerequisites",
            env={"DEBIAN_FRONTEND": "noninteractive"},
        )

        ctx.attempt(
            build_dep_argv(platform.release()),
            "Failed to install some kernel build dependencies",
        )

        ctx.log.success("Prerequisites installed successfully")
