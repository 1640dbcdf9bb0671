"""Logging configuration for client events."""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from . import api
from .config import LOG_FILE


def configure_logging(debug: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """Configure package-wide logging to a rotating file handler."""
    logger = logging.getLogger("term_chat")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    if not logger.handlers:
        path = log_file or LOG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(path, maxBytes=5 * 1024 * 1024, backupCount=3)
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    # the remote client is silent unless debugging
    logging.getLogger(api.__name__).setLevel(logging.DEBUG if debug else logging.WARNING)
    return logger
