"""Loguru sink management for the command line tool."""

from __future__ import annotations

import sys
from contextlib import suppress
from pathlib import Path

from loguru import logger

_CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"

_owned_sinks: list[int] = []
_default_removed = False


def configure_logging(level: str = "WARNING", log_file: Path | None = None) -> None:
    """Route logs to stderr at ``level`` and optionally to a rotating file.

    Only sinks created here are replaced on subsequent calls; sinks added by
    other code (tests, embedding applications) are left untouched.
    """

    global _default_removed
    if not _default_removed:
        # loguru installs handler 0 on import
        with suppress(ValueError):
            logger.remove(0)
        _default_removed = True

    while _owned_sinks:
        logger.remove(_owned_sinks.pop())

    _owned_sinks.append(logger.add(sys.stderr, level=level.upper(), format=_CONSOLE_FORMAT))

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _owned_sinks.append(
            logger.add(
                log_file,
                rotation="5 MB",
                retention=5,
                level="DEBUG",
                encoding="utf-8",
            )
        )
        logger.info("Log file enabled: {}", log_file)


__all__ = ["configure_logging"]
