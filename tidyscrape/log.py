"""Logging setup for tidyscrape.

Library modules log through ``logging.getLogger(__name__)``; every such logger
sits under the ``tidyscrape`` namespace, so a single call to :func:`configure`
controls all of them::

    from tidyscrape.log import configure
    configure("DEBUG")
"""

from __future__ import annotations

import logging
import sys
from typing import Union

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME = "tidyscrape"

_LevelT = Union[int, str]


def configure(level: _LevelT = "WARNING", log_format: str = _DEFAULT_FORMAT) -> logging.Logger:
    """(Re)configure the package logger with a single stderr handler."""
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(level.upper() if isinstance(level, str) else level)
    lg.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(log_format))
    lg.addHandler(handler)
    lg.propagate = False
    return lg


__all__ = ["configure"]
