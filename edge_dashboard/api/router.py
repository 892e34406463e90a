from fastapi import APIRouter

from .endpoints import cloudflare, edgeone, esa, health

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(cloudflare.router, prefix="/api/cf", tags=["cloudflare"])
api_router.include_router(edgeone.router, prefix="/api/eo", tags=["edgeone"])
api_router.include_router(esa.router, prefix="/api/esa", tags=["esa"])
