from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from .lib.env import PATHS

DEFAULT_LOG_PATH = PATHS.log_default
PACKAGE_LOGGER = "opi5_kernel_builder"

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")


def make_console() -> Console:
    return Console(theme=Theme({"logging.level.success": "bold green"}))


class BuildLogger(logging.LoggerAdapter):
    """Package logger plus a ``success()`` call at the SUCCESS level."""

    def __init__(self, logger: logging.Logger):
        super().__init__(logger, {})

    def success(self, msg: str, *args, **kwargs) -> None:
        self.log(SUCCESS, msg, *args, **kwargs)


def _file_handler(log_path: str) -> logging.Handler:
    Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    handler.setFormatter(
        logging.Formatter(
            fmt="[%(asctime)s] [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    handler.setLevel(logging.DEBUG)
    return handler


@contextmanager
def build_log(
    log_path: str = DEFAULT_LOG_PATH,
    *,
    verbose: bool = False,
    console: Optional[Console] = None,
) -> Iterator[BuildLogger]:
    """Scoped log sink for one pipeline run.

    Attaches an append-only file handler plus a coloured console handler to
    the package logger and yields it. Handlers are detached and closed on
    every exit path. If the log file cannot be opened, logging degrades to
    console-only and a warning is emitted.

    The console shows INFO and above; ``verbose`` also shows DEBUG, which
    is where captured command output goes. The file always gets DEBUG.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG)

    handlers: list[logging.Handler] = []

    console_handler = RichHandler(
        console=console or make_console(),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handlers.append(console_handler)

    file_error: Optional[OSError] = None
    try:
        handlers.append(_file_handler(log_path))
    except OSError as e:
        file_error = e

    for h in handlers:
        logger.addHandler(h)

    if file_error is not None:
        logger.warning("Could not open log file %s (%s); logging to console only", log_path, file_error)
    else:
        logger.debug("Logging initialized (file=%s)", log_path)

    try:
        yield BuildLogger(logger)
    finally:
        for h in handlers:
            logger.removeHandler(h)
            h.close()
