"""Logger factory for the package."""
from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = "grouphome_admin"
_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    root = logging.getLogger(PACKAGE_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        root.propagate = False
    root.setLevel(level)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger.

    Module names are already dotted under the package when imported normally;
    anything else is attached below it so one handler covers everything.
    """

    short = name.rsplit("grouphome_admin.", 1)[-1]
    return logging.getLogger(f"{PACKAGE_LOGGER}.{short}")
