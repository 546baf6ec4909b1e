import logging
import sys
from typing import Optional

from common.config import secrets


def get_logger(name: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(name or "docsync")
    if logger.handlers:
        return logger
    logger.setLevel((level or secrets.docsync_log_level).upper())

    handler = logging.StreamHandler(sys.stdout)
    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
