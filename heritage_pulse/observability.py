"""Logging setup for the heritage_pulse package.

Modules log through ``logging.getLogger(__name__)`` and pass context in
``extra={...}``. This module installs the single handler that turns those
records into either plain lines or JSON lines.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import ObservabilityConfig, get_config

ROOT_LOGGER = "heritage_pulse"

# Attributes every LogRecord carries; anything else came from ``extra``.
_RESERVED = set(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime"}

_HANDLER_NAME = "heritage_pulse.handler"


class JsonFormatter(logging.Formatter):
    """Format records as one JSON object per line, including ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(config: Optional[ObservabilityConfig] = None) -> logging.Logger:
    """Install the package log handler.

    Calling this more than once replaces the previous handler instead of
    stacking a second one.

    Args:
        config: Logging configuration, defaults to the application config.

    Returns:
        The package root logger.
    """
    config = config or get_config().observability
    logger = logging.getLogger(ROOT_LOGGER)

    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if config.structured:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(config.format))

    logger.addHandler(handler)
    logger.setLevel(config.level.upper())
    logger.propagate = False
    return logger
