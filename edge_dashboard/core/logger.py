from __future__ import annotations

import logging
from typing import Iterable

from edge_shared.logging.json import configure_logging as _shared_configure_logging
from edge_shared.logging.logger import is_configured

from .config import settings


class RedactingFilter(logging.Filter):
    """Blank out whole messages that mention a sensitive pattern."""

    def __init__(self, patterns: Iterable[str]):
        super().__init__()
        self.patterns = [p.lower() for p in patterns]

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        msg = record.getMessage().lower()
        if any(p in msg for p in self.patterns):
            record.msg = "[REDACTED SENSITIVE LOG CONTENT]"
            record.args = ()
        return True


def configure_logging():
    if is_configured():
        return
    _shared_configure_logging(
        service=settings.otel_service_name,
        level=settings.app_log_level,
        environment=settings.app_environment,
        redaction_patterns=settings.app_log_redaction_patterns,
    )
    # Attach redaction filter at root so it applies to all handlers
    root = logging.getLogger()
    for h in root.handlers:
        h.addFilter(RedactingFilter(settings.app_log_redaction_patterns))


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
