from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from prometheus_fastapi_instrumentator import Instrumentator

from .api.router import api_router
from .core.logger import configure_logging, get_logger
from .infrastructure.http import build_http_client
from .startup import initialize_application

configure_logging()
logger = get_logger("edge_dashboard.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("edge_dashboard_starting")
    initialize_application(app)
    app.state.http = build_http_client()
    try:
        yield
    finally:
        logger.info("edge_dashboard_stopping")
        await app.state.http.aclose()


app = FastAPI(title="Edge Dashboard API", version="0.1.0", lifespan=lifespan)
app.include_router(api_router)

Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    excluded_handlers=["/docs", "/openapi.json", "/metrics"],
).instrument(app)


@app.get("/metrics")
async def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
