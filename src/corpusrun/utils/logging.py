"""Centralized logging configuration for corpusrun."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "corpusrun"


def setup_logger(logfile: Optional[Path] = None, verbose: bool = False) -> logging.Logger:
    """Configure the ``corpusrun`` logger and return it.

    Console records go to stderr through a RichHandler so they never mix with
    the per-test lines on stdout. A FileHandler is added when ``logfile`` is
    given. Level is DEBUG when ``verbose`` is set, INFO otherwise.
    """

    level = logging.DEBUG if verbose else logging.INFO

    log = logging.getLogger(ROOT_LOGGER)
    log.setLevel(level)
    log.propagate = False

    if log.hasHandlers():
        log.handlers.clear()

    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        log_time_format="[%X]",
    )
    console_handler.setLevel(level)
    log.addHandler(console_handler)

    if logfile:
        logfile = Path(logfile)
        logfile.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(logfile)
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        log.addHandler(file_handler)
        log.debug("File logging enabled at: %s", logfile)

    log.debug("Logger configured with level=%s", logging.getLevelName(level))
    return log


def get_logger(name: str) -> logging.Logger:
    """Return a logger; pass ``__name__`` so it nests under ``corpusrun``."""

    return logging.getLogger(name)
