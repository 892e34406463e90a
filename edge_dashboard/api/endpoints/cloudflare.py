from fastapi import APIRouter, Depends, Query

from edge_shared.constants import Provider

from ...core.logger import get_logger
from ...infrastructure.metrics import API_REQUESTS_TOTAL
from ...metrics.periods import Period
from ...services.cloudflare import CloudflareAnalyticsService
from ..dependencies import get_cloudflare_service
from ..responses import not_configured, server_error

router = APIRouter()
logger = get_logger("edge_dashboard.api.cloudflare")


@router.get("/analytics")
async def analytics(
    period: Period = Query(Period.ONE_DAY),
    service: CloudflareAnalyticsService = Depends(get_cloudflare_service),
):
    API_REQUESTS_TOTAL.labels("cf_analytics").inc()
    if not service.accounts:
        return not_configured(Provider.CLOUDFLARE)
    try:
        report = await service.collect(period)
    except Exception as e:
        return server_error("cf_analytics", e)
    logger.info(
        "cf_analytics_served",
        extra={"period": period.value, "accounts": len(report.accounts)},
    )
    return report


@router.get("/workers")
async def workers(service: CloudflareAnalyticsService = Depends(get_cloudflare_service)):
    API_REQUESTS_TOTAL.labels("cf_workers").inc()
    if not service.accounts:
        return not_configured(Provider.CLOUDFLARE)
    try:
        return await service.collect_workers()
    except Exception as e:
        return server_error("cf_workers", e)
