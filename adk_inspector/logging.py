"""Structured logging helpers: JSON lines on stderr.

Every module logs through a child of the ``adk_inspector`` logger; only that
package logger carries a handler so records are emitted once.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from typing import Any

ROOT_LOGGER = "adk_inspector"
LEVEL_ENV_VAR = "ADK_INSPECTOR_LOG_LEVEL"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _configured_level() -> int:
    name = os.environ.get(LEVEL_ENV_VAR, "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(JsonFormatter())
        root.addHandler(handler)
        root.setLevel(_configured_level())
    return logging.getLogger(name)


def set_level(level: int | str) -> None:
    """Override the package log level (used by the CLI ``--verbose`` flag)."""
    get_logger().setLevel(level)
