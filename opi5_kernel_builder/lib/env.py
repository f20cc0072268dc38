from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path


@dataclass(frozen=True)
class Paths:
    firmware_dir: str = "/lib/firmware"
    lib_dir: str = "/usr/lib"
    opencl_vendors_dir: str = "/etc/OpenCL/vendors"
    vulkan_icd_dir: str = "/usr/share/vulkan/icd.d"
    boot_dir: str = "/boot"
    blob_dir: str = "/tmp/mali_install"
    debian_version: str = "/etc/debian_version"
    disk_check_dir: str = "/tmp"
    log_default: str = "/tmp/kernel_build.log"

    def under(self, root: str | Path) -> "Paths":
        """Re-root every system location below ``root`` (used by tests and staging)."""

        r = Path(root)
        return Paths(
            **{
                name: str(r / str(value).lstrip("/"))
                for name, value in asdict(self).items()
            }
        )


PATHS = Paths()
