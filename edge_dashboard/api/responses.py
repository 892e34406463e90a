"""JSON bodies shared by the provider endpoints.

Every failure body keeps an empty ``accounts`` list so the dashboard can
render the same layout whether or not data arrived.
"""

from fastapi import status
from fastapi.responses import JSONResponse

from edge_shared.constants import Provider

from ..core.logger import get_logger

logger = get_logger("edge_dashboard.api")


def not_configured(provider: Provider) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"error": f"{provider.label} not configured", "accounts": []},
    )


def server_error(endpoint: str, exc: Exception) -> JSONResponse:
    logger.error(
        "endpoint_failed",
        extra={"endpoint": endpoint, "error_type": type(exc).__name__},
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc) or type(exc).__name__, "accounts": []},
    )
