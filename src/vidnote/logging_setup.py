"""Logging for vidnote: a rotating file next to the config, plus stderr.

The stderr handler stays at WARNING unless --debug, so the TUI is not
drawn over. Calling ``setup_logging`` again replaces the handlers it
installed earlier rather than stacking more of them.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from vidnote import config

LOG_NAME = "vidnote.log"

_MAX_BYTES = 5 * 1024 * 1024
_BACKUPS = 2
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_OWNED = "_vidnote_owned"


def log_path() -> Path:
    return config.CONFIG_DIR / LOG_NAME


def _own(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _OWNED, True)
    return handler


def setup_logging(debug: bool = False) -> logging.Logger:
    """Install the file and stderr handlers on the ``vidnote`` logger."""
    logger = logging.getLogger("vidnote")
    for handler in [h for h in logger.handlers if getattr(h, _OWNED, False)]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    path = log_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(path, maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(_own(file_handler))

    stderr_handler = logging.StreamHandler()
    stderr_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    stderr_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(_own(stderr_handler))

    return logger
