"""Central logging configuration for the library."""
from __future__ import annotations

import logging
from typing import Optional

from docx_merger.config import get_config

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-level logger, configuring the root handler on first use."""
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers:
        level = getattr(logging, get_config().log_level, logging.INFO)
        logging.basicConfig(level=level, format=_FORMAT)
    return logger
