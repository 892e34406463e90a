from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from edge_shared.constants import Provider

from ...infrastructure.metrics import API_REQUESTS_TOTAL
from ...services.edgeone import EdgeOneService, UnknownAccountError
from ..dependencies import get_edgeone_service
from ..responses import not_configured, server_error

router = APIRouter()


@router.get("/zones")
async def zones(service: EdgeOneService = Depends(get_edgeone_service)):
    API_REQUESTS_TOTAL.labels("eo_zones").inc()
    if not service.accounts:
        return not_configured(Provider.EDGEONE)
    try:
        return await service.collect_zones()
    except Exception as e:
        return server_error("eo_zones", e)


@router.get("/traffic")
async def traffic(
    metric: str | None = None,
    zone_id: str | None = Query(None, alias="zoneId"),
    start_time: str | None = Query(None, alias="startTime"),
    end_time: str | None = Query(None, alias="endTime"),
    interval: str | None = None,
    account: str | None = None,
    service: EdgeOneService = Depends(get_edgeone_service),
):
    API_REQUESTS_TOTAL.labels("eo_traffic").inc()
    if not service.accounts:
        return not_configured(Provider.EDGEONE)
    try:
        return await service.traffic(
            metric=metric,
            zone_id=zone_id,
            start_time=start_time,
            end_time=end_time,
            interval=interval,
            account_name=account,
        )
    except UnknownAccountError as e:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": str(e), "accounts": []},
        )
    except Exception as e:
        return server_error("eo_traffic", e)
