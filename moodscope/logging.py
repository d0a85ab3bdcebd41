"""Logging setup for the moodscope command line.

Handlers hang off the ``moodscope`` package logger rather than the root
logger, so an application that embeds :class:`EmotionAnalysisService`
keeps its own logging untouched.  The terminal shows WARNING and above
(DEBUG with ``--verbose``, which includes the cache hit/miss lines).  With
``--log-dir`` a rotating ``moodscope.log`` records every analysis run at
``MOODSCOPE_LOG_LEVEL``.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

PACKAGE_LOGGER = "moodscope"
LOG_FILENAME = "moodscope.log"

# One analysis run writes a handful of lines; 1 MB holds months of runs
_MAX_BYTES = 1024 * 1024
_BACKUP_COUNT = 3


def resolve_level(name: str) -> int:
    """Level number for *name*, case-insensitive.  Unknown names give INFO."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(
    *,
    log_dir: Path | None = None,
    verbose: bool = False,
    file_level: str = "INFO",
) -> Path | None:
    """Install the terminal handler and, with *log_dir*, the log file.

    Calling again replaces the handlers from the previous call.  Returns the
    log file path, or ``None`` when only the terminal is configured.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    terminal = logging.StreamHandler()
    terminal.setLevel(logging.DEBUG if verbose else logging.WARNING)
    terminal.setFormatter(logging.Formatter("%(levelname)s | %(name)s | %(message)s"))
    logger.addHandler(terminal)

    if log_dir is None:
        return None

    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILENAME
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(resolve_level(file_level))
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(file_handler)
    logger.debug("Logging to %s", log_path)
    return log_path


def reset_logging() -> None:
    """Drop moodscope's handlers and let records propagate to the root again."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
