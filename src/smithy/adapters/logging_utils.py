# src/smithy/adapters/logging_utils.py
from __future__ import annotations

import json
import logging
import sys
import time
from decimal import Decimal
from typing import Any

from .config import config


def _json_default(value: Any) -> Any:
    # calculation snapshots carry Decimals
    if isinstance(value, Decimal):
        return float(value)
    return str(value)


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # attach contextual info if provided
        ctx = getattr(record, "context", None)
        if isinstance(ctx, dict):
            payload.update(ctx)
        err = getattr(record, "error", None)
        if err is not None:
            payload["error"] = str(err)
        return json.dumps(payload, default=_json_default)


def log_context(**fields: Any) -> dict[str, Any]:
    """Shape keyword fields for ``logger.info(msg, extra=log_context(...))``."""
    return {"context": fields}


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonLogFormatter())
        logger.addHandler(handler)
        logger.setLevel(config.LOG_LEVEL)
        logger.propagate = False
    return logger
