"""
Logging for the access engine.

Loggers are created per module with ``get_logger(__name__)`` and share one
stderr handler.

Environment Variables:
    ARKHAM_ACCESS_LOG_LEVEL: DEBUG, INFO, WARNING (default) or ERROR
    ARKHAM_ACCESS_LOG_JSON: if "1", emit one JSON object per line
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

_RECORD_FIELDS = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {"message"}


def _get_log_level() -> int:
    raw = os.getenv("ARKHAM_ACCESS_LOG_LEVEL", "")
    return _LOG_LEVELS.get(raw.strip().upper(), logging.WARNING)


def _is_json_output() -> bool:
    return os.getenv("ARKHAM_ACCESS_LOG_JSON", "0") == "1"


class AccessFormatter(logging.Formatter):
    def __init__(self, json_output: bool = False) -> None:
        super().__init__()
        self.json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).isoformat(timespec="seconds")
        if self.json_output:
            return self._format_json(record, timestamp)
        return self._format_text(record, timestamp)

    def _format_text(self, record: logging.LogRecord, timestamp: str) -> str:
        module = record.name.split(".")[-1]
        msg = f"{timestamp} [{record.levelname}] [{module}] {record.getMessage()}"
        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)
        return msg

    def _format_json(self, record: logging.LogRecord, timestamp: str) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": timestamp,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RECORD_FIELDS:
                log_data[key] = value
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


_loggers: Dict[str, logging.Logger] = {}
_handler: Optional[logging.Handler] = None


def _get_handler() -> logging.Handler:
    global _handler
    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(AccessFormatter(json_output=_is_json_output()))
    return _handler


def get_logger(name: str) -> logging.Logger:
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    logger.setLevel(_get_log_level())
    logger.addHandler(_get_handler())
    logger.propagate = False

    _loggers[name] = logger
    return logger


def set_log_level(level: int) -> None:
    for logger in _loggers.values():
        logger.setLevel(level)
