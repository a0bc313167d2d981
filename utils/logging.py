from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def configure_logger(
    name: str, log_file: Path, level: int = logging.INFO
) -> logging.Logger:
    """Return a logger writing to ``log_file``, or to stderr if it is not writable."""

    logger = logging.getLogger(name)
    if not logger.handlers:
        handler: logging.Handler
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(log_file, encoding="utf-8")
        except PermissionError:
            handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
