from __future__ import annotations

import io
import os
from dataclasses import replace
from pathlib import Path
from typing import Optional

import pytest
from rich.console import Console

from fakes import FakeRunner
from opi5_kernel_builder.build_config import BuildConfig
from opi5_kernel_builder.lib.env import Paths
from opi5_kernel_builder.logging_utils import build_log
from opi5_kernel_builder.pipeline import BuildCtx


@pytest.fixture
def paths(tmp_path: Path) -> Paths:
    return Paths().under(tmp_path / "root")


@pytest.fixture
def make_cfg(tmp_path: Path):
    def _make(**overrides) -> BuildConfig:
        base = BuildConfig(
            build_dir=str(tmp_path / "build"),
            log_path=str(tmp_path / "kernel_build.log"),
            jobs=4,
        )
        return replace(base, **overrides)

    return _make


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), force_terminal=False, width=120)


@pytest.fixture
def as_root(monkeypatch):
    monkeypatch.setattr(os, "geteuid", lambda: 0)


@pytest.fixture
def make_ctx(paths: Paths, make_cfg, console: Console):
    """Factory for BuildCtx objects wired to a FakeRunner and a real log sink."""

    open_logs = []

    def _make(runner: Optional[FakeRunner] = None, **overrides) -> BuildCtx:
        cfg = make_cfg(**overrides)
        cm = build_log(cfg.log_path, console=console)
        log = cm.__enter__()
        open_logs.append(cm)
        return BuildCtx(cfg=cfg, paths=paths, runner=runner or FakeRunner(), log=log)

    yield _make

    for cm in reversed(open_logs):
        cm.__exit__(None, None, None)
