"""JSON log records for the dashboard API.

Records carry the service identity next to whatever was passed in ``extra``.
Keys matching a redaction pattern are masked at any depth, including inside
lists, before the record is serialised.
"""

from __future__ import annotations

import json
import logging
import os
import socket
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel

# LogRecord attributes that carry no useful context in the JSON output
_RECORD_NOISE = (
    "args",
    "msg",
    "levelno",
    "msecs",
    "relativeCreated",
    "exc_text",
    "exc_info",
    "created",
)

REDACTED = "[REDACTED]"


class SensitiveDataFilter:
    def __init__(self, patterns: Iterable[str]):
        self.patterns = [p.lower() for p in patterns]

    def is_sensitive(self, key: Any) -> bool:
        lowered = str(key).lower()
        return any(p in lowered for p in self.patterns)

    def filter(self, data: dict) -> dict:
        return {
            k: REDACTED if self.is_sensitive(k) else self._scrub(v)
            for k, v in data.items()
        }

    def _scrub(self, value: Any) -> Any:
        if isinstance(value, dict):
            return self.filter(value)
        if isinstance(value, (list, tuple)):
            return [self._scrub(v) for v in value]
        return value


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Enum):
        return value.value
    return str(value)


class CustomJsonFormatter(logging.Formatter):  # type: ignore[misc]
    def __init__(
        self,
        service: str,
        environment: str,
        redaction_patterns: Iterable[str],
    ):
        super().__init__()
        self.hostname = socket.gethostname()
        self.pid = os.getpid()
        self.service_name = service
        self.environment = environment
        self.sensitive_filter = SensitiveDataFilter(redaction_patterns)

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        data = {k: v for k, v in record.__dict__.items() if k not in _RECORD_NOISE}
        data.update(
            message=record.getMessage(),
            timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            service=self.service_name,
            hostname=self.hostname,
            pid=self.pid,
            environment=self.environment,
        )
        if record.exc_info:
            data["exception"] = self.format_exception(record.exc_info)
        return json.dumps(self.sensitive_filter.filter(data), default=_json_default)

    @staticmethod
    def format_exception(exc_info) -> dict:
        exc_type, exc, tb = exc_info
        return {
            "type": exc_type.__name__,
            "message": str(exc),
            "stack": traceback.format_tb(tb),
        }


def configure_logging(
    service: str,
    environment: str,
    level: str,
    redaction_patterns: Iterable[str],
) -> logging.Logger:
    """Install a single JSON stream handler on the root logger."""
    handler = logging.StreamHandler()
    handler.setFormatter(CustomJsonFormatter(service, environment, redaction_patterns))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    from edge_shared.logging.logger import mark_configured

    mark_configured()
    return root


__all__ = [
    "CustomJsonFormatter",
    "configure_logging",
    "SensitiveDataFilter",
]
