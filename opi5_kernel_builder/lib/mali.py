from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

from .env import Paths
from .manifests import load_mali_manifest


@dataclass(frozen=True)
class Blob:
    name: str
    url: str


@dataclass(frozen=True)
class MaliLayout:
    """Where each Mali blob is downloaded to and installed at."""

    paths: Paths
    manifest: Dict[str, Any]

    @classmethod
    def for_paths(cls, paths: Paths) -> "MaliLayout":
        return cls(paths=paths, manifest=load_mali_manifest())

    def _blob(self, key: str) -> Blob:
        entry = self.manifest[key]
        return Blob(name=str(entry["name"]), url=str(entry["url"]))

    @property
    def firmware(self) -> Blob:
        return self._blob("firmware")

    @property
    def driver(self) -> Blob:
        return self._blob("driver")

    @property
    def vulkan_driver(self) -> Blob:
        return self._blob("vulkan_driver")

    def downloaded(self, blob: Blob) -> Path:
        return Path(self.paths.blob_dir) / blob.name

    @property
    def firmware_path(self) -> Path:
        return Path(self.paths.firmware_dir) / self.firmware.name

    @property
    def driver_path(self) -> Path:
        return Path(self.paths.lib_dir) / self.driver.name

    @property
    def vulkan_driver_path(self) -> Path:
        return Path(self.paths.lib_dir) / self.vulkan_driver.name

    @property
    def vulkan_link_path(self) -> Path:
        return Path(self.paths.lib_dir) / str(self.manifest["vulkan_driver"]["link"])

    def link_table(self) -> List[Tuple[Path, Path]]:
        """(link, target) pairs; every alias resolves to the one driver file."""

        return [(Path(self.paths.lib_dir) / str(name), self.driver_path) for name in self.manifest["links"]]

    @property
    def opencl_icd_path(self) -> Path:
        return Path(self.paths.opencl_vendors_dir) / str(self.manifest["icd"]["opencl_name"])

    @property
    def vulkan_icd_path(self) -> Path:
        return Path(self.paths.vulkan_icd_dir) / str(self.manifest["icd"]["vulkan_name"])

    @property
    def vulkan_api_version(self) -> str:
        return str(self.manifest["icd"]["vulkan_api_version"])

    @property
    def extras(self) -> Dict[str, str]:
        return {k: str(v) for k, v in self.manifest["extras"].items()}
