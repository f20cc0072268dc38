from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from ..build_config import BuildConfig
from ..errors import StepFailed
from ..lib.assets import write_text_file
from ..lib.mali import MaliLayout
from ..pipeline import BuildCtx, Policy

logger = logging.getLogger(__name__)


def vulkan_icd(library_path: str, api_version: str) -> Dict[str, Any]:
    return {
        "file_format_version": "1.0.0",
        "ICD": {
            "library_path": library_path,
            "api_version": api_version,
        },
    }


def pick_vulkan_library(mali: MaliLayout) -> Path:
    """Prefer the Vulkan-capable variant when it was installed."""

    if mali.vulkan_driver_path.exists():
        return mali.vulkan_driver_path
    return mali.driver_path


class EnableVulkanStep:
    step_id = "45_enable_vulkan"
    policy = Policy.FATAL

    def enabled(self, cfg: BuildConfig) -> bool:
        return cfg.install_gpu_blobs and cfg.enable_vulkan

    def run(self, ctx: BuildCtx) -> None:
        ctx.log.info("Setting up Vulkan support for Mali G610...")
        mali = MaliLayout.for_paths(ctx.paths)

        library = pick_vulkan_library(mali)
        logger.debug("Vulkan ICD library: %s", library)
        contents = json.dumps(vulkan_icd(str(library), mali.vulkan_api_version), indent=4) + "\n"

        try:
            write_text_file(mali.vulkan_icd_path, contents, mode=0o644, dry_run=ctx.cfg.dry_run)
        except OSError as e:
            raise StepFailed(f"Failed to create Mali Vulkan ICD file ({e})") from e

        ctx.log.success("Vulkan support configured successfully")
