# core/logs.py
from __future__ import annotations

import logging
import os

_ROOT = "firdesk"
_configured = False


def configure_logging(level: str | None = None) -> logging.Logger:
    """Configure the firdesk logger once. Safe to call on every Streamlit rerun."""
    global _configured
    logger = logging.getLogger(_ROOT)
    lvl = (level or os.getenv("FIR_LOG_LEVEL", "INFO")).upper()
    logger.setLevel(getattr(logging, lvl, logging.INFO))
    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
        _configured = True
    return logger


def get_logger(name: str) -> logging.Logger:
    if not name.startswith(_ROOT):
        name = f"{_ROOT}.{name}"
    return logging.getLogger(name)
