"""Process logging setup for the reports API."""

from __future__ import annotations

import logging

REPORT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DRIVER_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncpg")


def resolve_log_level(level: str) -> int:
    """Map a LOG_LEVEL value such as ' debug ' to a logging level, defaulting to INFO."""

    resolved = logging.getLevelName(level.strip().upper()) if level.strip() else logging.INFO
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(*, level: str) -> int:
    """Install the root handler and keep database driver loggers at WARNING or above."""

    resolved = resolve_log_level(level)
    logging.basicConfig(level=resolved, format=REPORT_LOG_FORMAT)
    for name in DRIVER_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
    return resolved
