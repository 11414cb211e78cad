"""Process-wide logging setup for the inspection services."""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

from inspection.config import Settings, settings as default_settings


ROOT_LOGGER_NAME = "inspection"
_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(module)s:%(lineno)d | %(message)s"


def init_logging(cfg: Settings | None = None) -> logging.Logger:
    cfg = cfg or default_settings
    level = getattr(logging, cfg.log_level, logging.INFO)

    formatter = logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    # Re-initialising replaces handlers instead of stacking duplicates.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if cfg.log_file:
        log_dir = os.path.dirname(cfg.log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(cfg.log_file, maxBytes=5_000_000, backupCount=5, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    logger.info("Logging initialized", extra={"path": cfg.log_file or "<stderr>"})
    return logger
