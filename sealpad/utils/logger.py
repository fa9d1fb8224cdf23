# sealpad/utils/logger.py

import logging

from sealpad.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_configured = False


def setup_logger(level: str = LOG_LEVEL) -> logging.Logger:
    """
    Configure the root logger once for the whole process.
    Safe to call repeatedly (app factory, tests, scripts).
    """
    global _configured
    root = logging.getLogger()
    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        _configured = True
    root.setLevel(level)
    return logging.getLogger("sealpad")


def short_id(note_id: str) -> str:
    """Truncated id for log lines; full ids never hit the logs."""
    return f"{note_id[:8]}..."
