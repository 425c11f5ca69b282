"""Application-wide logger writing to platformdirs user_log_dir."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from platformdirs import user_log_dir

_APP_NAME = "yata_sync"
_LOG_FILE = "yata-sync.log"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3

_logger: logging.Logger | None = None


def get_logger(component: str | None = None) -> logging.Logger:
    """Return the application logger, initialising it on first call.

    Args:
        component: Optional component name; returns a child logger such as
            ``yata_sync.sync`` that shares the application handler.
    """
    global _logger
    if _logger is None:
        _logger = _build_logger()
    if component:
        return _logger.getChild(component)
    return _logger


def set_level(level: str | int) -> None:
    """Set the application log level (e.g. from configuration)."""
    get_logger().setLevel(level)


def _build_logger() -> logging.Logger:
    log_dir = Path(user_log_dir(_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        log_dir / _LOG_FILE,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )

    logger = logging.getLogger(_APP_NAME)
    logger.setLevel(logging.INFO)
    if not logger.handlers:
        logger.addHandler(handler)
    logger.propagate = False
    return logger
