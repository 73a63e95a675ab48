from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys
from typing import TYPE_CHECKING

from .workspace import _work_dir

if TYPE_CHECKING:
    from sheetflow.config import Settings


_LOGGER: logging.Logger | None = None

LOGGER_NAME = "sheetflow"
LOG_FILE_NAME = "app.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_MAX_BYTES = 2 * 1024 * 1024
LOG_BACKUP_COUNT = 3


def get_logger(log_dir: Path | None = None) -> logging.Logger:
    """Return the process-wide ``sheetflow`` logger, configuring it on first use.

    Records go to stdout and to a rotating ``app.log`` inside ``log_dir``,
    which defaults to ``<work dir>/logs``. The work dir is ``$SHEETFLOW_HOME``
    when set, otherwise ``sheetflow/work`` under the project root. Later
    calls return the same logger and ignore ``log_dir``.
    """
    global _LOGGER
    if _LOGGER is not None:
        return _LOGGER

    base = Path(log_dir) if log_dir is not None else _work_dir() / "logs"
    base.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)
    logger.propagate = False

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            base / LOG_FILE_NAME,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        ),
        logging.StreamHandler(sys.stdout),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    _LOGGER = logger
    return logger


def debug_log(settings: "Settings", message: str, force: bool = False) -> None:
    """Log ``message`` when debug mode is on or ``force`` marks it as always-on."""

    if settings.debug or force:
        get_logger().info(message)
