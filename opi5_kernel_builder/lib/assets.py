from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def install_file(src: str | Path, dst: str | Path, *, mode: Optional[int] = None, dry_run: bool = False) -> Path:
    """Copy ``src`` to the file path ``dst``, creating parent directories."""

    s = Path(src)
    d = Path(dst)

    if dry_run:
        logger.info("Would copy %s -> %s", str(s), str(d))
        return d

    if not s.is_file():
        raise FileNotFoundError(str(s))

    d.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(s, d)
    if mode is not None:
        os.chmod(d, mode)
    logger.debug("Copied %s -> %s", str(s), str(d))
    return d


def relink(target: str | Path, link: str | Path, *, dry_run: bool = False) -> None:
    """Point ``link`` at ``target``, replacing whatever is there (ln -sf)."""

    lp = Path(link)
    if dry_run:
        logger.info("Would link %s -> %s", str(lp), str(target))
        return

    if lp.is_symlink() or lp.exists():
        if lp.is_dir() and not lp.is_symlink():
            raise IsADirectoryError(str(lp))
        lp.unlink()
    os.symlink(str(target), str(lp))


def write_text_file(path: str | Path, contents: str, *, mode: int = 0o644, dry_run: bool = False) -> Path:
    p = Path(path)
    if dry_run:
        logger.info("Would write %s", str(p))
        return p

    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(contents, encoding="utf-8")
    os.chmod(p, mode)
    return p


def append_lines(path: str | Path, lines: list[str] | tuple[str, ...], *, dry_run: bool = False) -> None:
    p = Path(path)
    if dry_run:
        logger.info("Would append %d lines to %s", len(lines), str(p))
        return

    with p.open("a", encoding="utf-8") as fh:
        for line in lines:
            fh.write(f"{line}\n")


def remove_tree(path: str | Path, *, dry_run: bool = False) -> None:
    p = Path(path)
    if dry_run:
        logger.info("Would remove %s", str(p))
        return

    if p.is_symlink() or p.is_file():
        p.unlink()
    elif p.exists():
        shutil.rmtree(p)
