"""Logging setup for the staging prompt CLI.

Log lines go to stderr so that stdout carries only the prompt or JSON
output. The level comes from ``--verbose`` or the ``log_level`` setting
(``LOG_LEVEL`` in the environment).
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are only useful when debugging a fetch
_QUIET_LOGGERS = ("urllib3", "requests")


def resolve_level(level: int | str | None) -> int:
    """Map an int or a level name ("debug", " WARNING ") to a logging level.

    Unknown names and ``None`` resolve to INFO.
    """
    if isinstance(level, int):
        return level
    name = (level or "").strip().upper()
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(
    level: int | str | None = logging.INFO,
    module_name: str = "staging_prompt",
) -> logging.Logger:
    """Attach a stderr handler to the package logger and set its level.

    Calling it again updates the level instead of adding a second handler.

    Args:
        level: Level as an int or a name such as "DEBUG".
        module_name: Logger to configure.

    Returns:
        The configured logger.
    """
    resolved = resolve_level(level)
    logger = logging.getLogger(module_name)
    logger.setLevel(resolved)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(resolved)

    if resolved > logging.DEBUG:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    return logger
