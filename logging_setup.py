from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "nameplate_labels"


def setup_logging(debug: bool = False) -> logging.Logger:
    """Attach console (and optional rotating file) handlers to the root logger."""

    log = logging.getLogger(LOGGER_NAME)
    if getattr(log, "_configured", False):  # idempotent
        return log

    level_name = os.getenv("LOG_LEVEL", "DEBUG" if debug else "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(fmt)
    root.addHandler(ch)

    log_file = os.getenv("LOG_FILE")
    if log_file:
        fh = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    setattr(log, "_configured", True)
    log.debug("Logging initialized. Level=%s", logging.getLevelName(level))
    return log
