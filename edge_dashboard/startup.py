import asyncio
from typing import Mapping

from fastapi import FastAPI

from .core.config import settings
from .core.credentials import load_credentials
from .core.logger import configure_logging, get_logger

logger = get_logger("edge_dashboard.startup")


def initialize_application(app: FastAPI, env: Mapping[str, str] | None = None) -> None:
    """Resolve provider accounts once and mark the app ready.

    Unconfigured providers are not an error; their endpoints answer with a
    "not configured" body.
    """
    configure_logging()
    logger.info("initializing_application", extra={"service": settings.otel_service_name})

    app.state.credentials = load_credentials(env)
    app.state.ready_event = asyncio.Event()

    counts = app.state.credentials.counts()
    for provider, count in counts.items():
        if not count:
            logger.warning("provider_not_configured", extra={"provider": provider})

    app.state.ready_event.set()
    logger.info("application_initialized", extra={"accounts": counts})
