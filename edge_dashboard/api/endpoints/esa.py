from fastapi import APIRouter, Depends, Query

from edge_shared.constants import Provider

from ...infrastructure.metrics import API_REQUESTS_TOTAL
from ...services.esa import EsaService
from ..dependencies import get_esa_service
from ..responses import not_configured, server_error

router = APIRouter()


@router.get("")
async def esa_overview(
    details: bool = False,
    skip_time_series: bool = Query(False, alias="skipTimeSeries"),
    service: EsaService = Depends(get_esa_service),
):
    API_REQUESTS_TOTAL.labels("esa").inc()
    if not service.accounts:
        return not_configured(Provider.ESA)
    try:
        return await service.collect(details=details, skip_time_series=skip_time_series)
    except Exception as e:
        return server_error("esa", e)
