"""Logging setup for the slideforms service.

Records go to ``info.log`` (INFO and above) and ``error.log`` (ERROR and
above) in the configured log directory, plus a console stream.
"""

import logging
import sys
from pathlib import Path

from slideforms.core.config import Settings, get_settings

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Per-request chatter from the HTTP client and the multipart parser.
QUIET_LOGGERS = ("httpx", "httpcore", "multipart", "python_multipart")


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=DATE_FORMAT))
    return handler


def setup_logging(log_dir: Path | None = None, settings: Settings | None = None) -> logging.Logger:
    """Install the file and console handlers on the root logger.

    Args:
        log_dir: Directory for the log files. Defaults to ``settings.log_dir``.
        settings: Settings providing the level and directory. Defaults to the
            global settings.

    Returns:
        The configured root logger.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level, logging.INFO)
    log_dir = log_dir or settings.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    for handler in (
        _handler(logging.FileHandler(log_dir / "info.log", encoding="utf-8"), logging.INFO, FILE_FORMAT),
        _handler(logging.FileHandler(log_dir / "error.log", encoding="utf-8"), logging.ERROR, FILE_FORMAT),
        _handler(logging.StreamHandler(sys.stdout), level, CONSOLE_FORMAT),
    ):
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    root_logger.info(f"Logging to {log_dir} at level {settings.log_level}")
    return root_logger
