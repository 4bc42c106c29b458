"""Centralized logger configuration.

Usage:
    from certify_grc.logger import get_logger
    logger = get_logger(__name__)

The level comes from ``LOG_LEVEL`` (see ``Config``).
"""
import logging
from typing import Optional

from .config import config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    level = (level or config.LOG_LEVEL).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)
