import httpx
from fastapi import Depends, Request

from ..domain.models import CredentialRegistry
from ..services.cloudflare import CloudflareAnalyticsService
from ..services.edgeone import EdgeOneService
from ..services.esa import EsaService


def get_credentials(request: Request) -> CredentialRegistry:
    return request.app.state.credentials  # type: ignore[return-value]


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http  # type: ignore[return-value]


def get_cloudflare_service(
    credentials: CredentialRegistry = Depends(get_credentials),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> CloudflareAnalyticsService:
    return CloudflareAnalyticsService(http, credentials.cloudflare)


def get_edgeone_service(
    credentials: CredentialRegistry = Depends(get_credentials),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> EdgeOneService:
    return EdgeOneService(http, credentials.edgeone)


def get_esa_service(
    credentials: CredentialRegistry = Depends(get_credentials),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> EsaService:
    return EsaService(http, credentials.esa)
