# src/comtrade_share/logging_config.py
from __future__ import annotations

import logging
from typing import Optional, Union

from comtrade_share import config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: Optional[Union[int, str]] = None) -> int:
    """Set up root logging; COMTRADE_DEBUG=1 turns on request tracing."""
    if level is None:
        level = logging.DEBUG if config.DEBUG else logging.INFO
    elif isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("comtrade_share").setLevel(level)
    logging.getLogger(__name__).debug("Logging configured, level=%s", logging.getLevelName(level))
    return level
