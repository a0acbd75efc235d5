"""Loguru configuration for the command line."""

from __future__ import annotations

import os
import sys

from loguru import logger

LOG_LEVEL_ENV = "GITLAB_STATS_LOG_LEVEL"

_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<level>{message}</level>"
)


def configure_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with a compact stderr sink."""
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV, "INFO")

    logger.remove()
    logger.add(sys.stderr, format=_FORMAT, level=level.upper(), colorize=None)
