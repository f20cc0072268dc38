from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List


def _manifest_dir() -> Path:
    # opi5_kernel_builder/lib/manifests.py -> opi5_kernel_builder/manifests
    return Path(__file__).resolve().parents[1] / "manifests"


def load_yaml_rel(rel_path: str) -> Dict[str, Any]:
    """Load a YAML manifest shipped inside the package (manifests/...)."""
    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("PyYAML required to load manifests") from e

    p = _manifest_dir() / rel_path.lstrip("/")
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {p}")
    return data


def _flatten_groups(data: Dict[str, Any], name: str) -> List[str]:
    groups = data.get("groups") or {}
    if not isinstance(groups, dict):
        raise ValueError(f"{name}: 'groups' must be a mapping")
    out: List[str] = []
    for items in groups.values():
        out.extend(str(i) for i in (items or []))
    return out


@lru_cache(maxsize=None)
def host_packages() -> tuple[str, ...]:
    """Ordered apt package list for the single batched install."""

    return tuple(_flatten_groups(load_yaml_rel("packages.yaml"), "packages.yaml"))


@lru_cache(maxsize=None)
def kernel_config_fragment() -> tuple[str, ...]:
    """Ordered CONFIG_* lines appended to the generated .config."""

    return tuple(_flatten_groups(load_yaml_rel("kernel_config.yaml"), "kernel_config.yaml"))


@lru_cache(maxsize=None)
def load_mali_manifest() -> Dict[str, Any]:
    return load_yaml_rel("mali.yaml")


@lru_cache(maxsize=None)
def load_sources_manifest() -> Dict[str, Any]:
    return load_yaml_rel("sources.yaml")
