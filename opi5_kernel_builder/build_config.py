from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict

from .errors import ConfigError
from .lib.env import PATHS

DEFAULT_KERNEL_VERSION = "6.8.0"
DEFAULT_BUILD_DIR = "/tmp/kernel_build"
DEFAULT_CROSS_COMPILE = "aarch64-linux-gnu-"
DEFAULT_DEFCONFIG = "rockchip_linux_defconfig"
TARGET_ARCH = "arm64"


def detect_jobs() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class BuildConfig:
    kernel_version: str = DEFAULT_KERNEL_VERSION
    build_dir: str = DEFAULT_BUILD_DIR
    cross_compile: str = DEFAULT_CROSS_COMPILE
    arch: str = TARGET_ARCH
    defconfig: str = DEFAULT_DEFCONFIG
    jobs: int = 0
    clean_build: bool = False
    install_gpu_blobs: bool = True
    enable_opencl: bool = True
    enable_vulkan: bool = True
    verbose: bool = False
    no_install: bool = False
    cleanup: bool = False
    verify_gpu: bool = False
    dry_run: bool = False
    log_path: str = PATHS.log_default

    def __post_init__(self) -> None:
        for name in ("kernel_version", "build_dir", "cross_compile", "defconfig"):
            if not str(getattr(self, name)).strip():
                raise ConfigError(f"{name} must not be empty")
        if self.arch != TARGET_ARCH:
            raise ConfigError(f"arch is fixed to {TARGET_ARCH}, got {self.arch!r}")
        if self.jobs <= 0:
            object.__setattr__(self, "jobs", detect_jobs())

    @property
    def kernel_dir(self) -> Path:
        return Path(self.build_dir) / "linux"

    @property
    def kernel_release(self) -> str:
        """Release tag used for /boot file names and the initramfs."""

        return f"{self.kernel_version}-opi5plus-mali"

    @property
    def kernel_env(self) -> Dict[str, str]:
        return {"ARCH": self.arch, "CROSS_COMPILE": self.cross_compile}

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]


def parse_jobs(value: Any) -> int:
    """Turn a job-count token into a positive count; anything unusable means auto."""

    try:
        jobs = int(str(value).strip())
    except (TypeError, ValueError):
        return 0
    return jobs if jobs > 0 else 0


def load_config_file(path: str) -> Dict[str, Any]:
    """Read optional YAML defaults (keys are BuildConfig field names)."""

    p = Path(path)
    if not p.exists():
        raise ConfigError(f"config file not found: {path}")

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError("config file must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the config file") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping/object")

    known = set(BuildConfig.field_names())
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"{path}: unknown keys: {', '.join(unknown)}")

    if "arch" in raw and raw["arch"] != TARGET_ARCH:
        raise ConfigError(f"arch is fixed to {TARGET_ARCH}")

    if raw.get("install_gpu_blobs") is False:
        raw["enable_opencl"] = False
        raw["enable_vulkan"] = False

    if "jobs" in raw:
        raw["jobs"] = parse_jobs(raw["jobs"])

    # YAML reads 6.10 as the float 6.1; converting back would lose the digit.
    for f in fields(BuildConfig):
        if f.name in raw and f.type == "str" and not isinstance(raw[f.name], str):
            raise ConfigError(
                f"{path}: {f.name} must be a string, got {raw[f.name]!r}; quote it, e.g. {f.name}: \"...\""
            )

    return raw
