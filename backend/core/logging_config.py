"""Structured JSON logging for the digest service."""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import IO, Any, Dict, Optional

__all__ = ["configure_logging", "JSONLogFormatter"]

SERVICE_NAME = "weekly-digest"

_LOGGING_CONFIGURED = False


class JSONLogFormatter(logging.Formatter):
    """Render log records as single-line JSON objects.

    Anything passed through ``extra=`` becomes a top-level key, so call sites
    can attach ``operation``, ``model``, ``status_code`` and so on.
    """

    _RESERVED_ATTRS = frozenset(
        logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__.keys()
    ) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_entry: Dict[str, Any] = {
            "timestamp": timestamp,
            "severity": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "function": record.funcName,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in self._RESERVED_ATTRS or key.startswith("_"):
                continue
            log_entry[key] = value

        if record.exc_info:
            log_entry["error"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_entry["stack"] = record.stack_info

        return json.dumps(log_entry, default=str, ensure_ascii=False)


def configure_logging(level: Optional[str] = None, stream: Optional[IO[str]] = None, *, force: bool = False) -> None:
    """Install a single JSON handler on the root logger.

    Safe to call repeatedly; later calls are no-ops unless ``force`` is set.
    """

    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED and not force:
        return

    log_level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = logging.getLevelName(log_level_name)
    if isinstance(log_level, str):  # getLevelName returns a string for unknown names
        log_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONLogFormatter())
    root_logger.addHandler(handler)

    logging.captureWarnings(True)

    _LOGGING_CONFIGURED = True
