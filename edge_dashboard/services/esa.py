from __future__ import annotations

import asyncio
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Sequence

import httpx

from ..core.config import Settings, settings
from ..core.logger import get_logger
from ..domain.esa import EsaAccount, EsaQuota, EsaReport, EsaRoutine, EsaSite
from ..domain.models import AccountConfig
from ..infrastructure.esa.client import EsaClient
from ..infrastructure.http import ProviderAPIError
from ..normalization import esa as normalize
from ..normalization.fields import pick_str

logger = get_logger("edge_dashboard.services.esa")

TIME_SERIES_FIELDS = json.dumps(
    [
        {"FieldName": "Traffic", "Dimension": ["ALL"]},
        {"FieldName": "Requests", "Dimension": ["ALL"]},
    ],
    separators=(",", ":"),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


class EsaService:
    """Sites, traffic, quotas and Edge Routine state per ESA account.

    Only a failed ``ListSites`` marks the account itself as failed; every
    other call degrades to an empty section plus a ``warnings`` entry.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        accounts: Sequence[AccountConfig],
        config: Settings = settings,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.http = http
        self.accounts = list(accounts)
        self.config = config
        self._now = now

    def client(self, account: AccountConfig) -> EsaClient:
        return EsaClient(self.http, account, self.config)

    async def collect(self, details: bool = False, skip_time_series: bool = False) -> EsaReport:
        accounts = await asyncio.gather(
            *(self.account(a, details, skip_time_series) for a in self.accounts)
        )
        return EsaReport(accounts=list(accounts))

    async def account(
        self,
        account: AccountConfig,
        details: bool = False,
        skip_time_series: bool = False,
    ) -> EsaAccount:
        """Report one account. Request and byte totals cover only the first
        ``esa_max_sites`` matching sites, the ones that get time series."""
        client = self.client(account)
        try:
            listing = await client.call("ListSites")
        except ProviderAPIError as e:
            logger.error(
                "esa_site_listing_failed",
                extra={"account": account.name, "error": str(e)},
            )
            return EsaAccount(name=account.name, error=str(e))

        raw_sites = normalize.raw_sites(listing)
        sites = [
            s
            for s in (normalize.site(raw) for raw in raw_sites)
            if account.matches(s.site_name, s.site_id)
        ][: self.config.esa_max_sites]

        if not skip_time_series:
            await asyncio.gather(*(self.fill_time_series(client, s) for s in sites))

        result = EsaAccount(
            name=account.name,
            sites=sites,
            total_requests=sum(s.requests for s in sites),
            total_bytes=sum(s.bytes for s in sites),
        )

        result.instance_id = normalize.instance_id(
            raw_sites[0] if raw_sites else {},
            {"InstanceId": sites[0].instance_id} if sites else {},
        ) or await self.default_instance_id(client, result.warnings)
        result.quota_source = "instance" if result.instance_id else "fallback"

        if sites:
            result.quotas = await self.quotas(client, sites[0].site_id, result.warnings)

        routines, plans, er_service = await asyncio.gather(
            self.routines(client, details),
            client.call("ListEdgeRoutinePlans"),
            client.call("GetErService"),
            return_exceptions=True,
        )
        for outcome in (routines, plans, er_service):
            if isinstance(outcome, ProviderAPIError):
                self._warn(account, outcome, result.warnings)
            elif isinstance(outcome, BaseException):
                raise outcome

        if not isinstance(plans, BaseException):
            result.edge_routine_plans = normalize.plans(plans)
        if not isinstance(er_service, BaseException):
            result.er_service = normalize.er_service(er_service)
        if not isinstance(routines, BaseException):
            items, result.routine_count = routines
            er_status = pick_str(result.er_service, "Status")
            result.routines = [
                r if r.status else r.model_copy(update={"status": er_status})
                for r in items[: self.config.esa_max_routines]
            ]
        return result

    @staticmethod
    def _warn(account: AccountConfig, error: ProviderAPIError, warnings: list[str]) -> None:
        logger.warning(
            "esa_call_degraded",
            extra={"account": account.name, "action": error.action, "error": error.message},
        )
        warnings.append(str(error))

    async def fill_time_series(self, client: EsaClient, site: EsaSite) -> None:
        """Attach 24h request / traffic totals and series to ``site`` in place."""
        if not site.site_id:
            return
        now = self._now()
        try:
            response = await client.call(
                "DescribeSiteTimeSeriesData",
                {
                    "SiteId": site.site_id,
                    "StartTime": _iso(now - timedelta(hours=self.config.esa_timeseries_hours)),
                    "EndTime": _iso(now),
                    "Fields": TIME_SERIES_FIELDS,
                },
            )
        except ProviderAPIError as e:
            logger.warning(
                "esa_time_series_failed",
                extra={"site": site.site_name, "error": str(e)},
            )
            site.error = str(e)
            return

        series = normalize.time_series(response)
        site.requests = series["requests"]
        site.bytes = series["bytes"]
        site.time_series_requests = series["requests_series"]
        site.time_series_traffic = series["traffic_series"]

    async def default_instance_id(self, client: EsaClient, warnings: list[str]) -> str:
        try:
            response = await client.call(
                "ListUserRatePlanInstances", {"PageNumber": 1, "PageSize": 10}
            )
        except ProviderAPIError as e:
            self._warn(client.account, e, warnings)
            return ""
        return normalize.first_instance_id(response)

    async def quotas(self, client: EsaClient, site_id: str, warnings: list[str]) -> list[EsaQuota]:
        try:
            response = await client.call(
                "ListInstanceQuotasWithUsage",
                {"SiteId": site_id, "QuotaNames": ",".join(self.config.esa_quota_names)},
            )
        except ProviderAPIError as e:
            self._warn(client.account, e, warnings)
            return []
        return normalize.quotas(response)

    async def routines(self, client: EsaClient, details: bool) -> tuple[list[EsaRoutine], int]:
        """Routines of the account, with ``GetRoutine`` detail for the first few.

        Routines listed without detail are reported as deployed.
        """
        response = await client.call(
            "ListUserRoutines",
            {"PageNumber": 1, "PageSize": self.config.esa_routine_page_size},
        )
        items, total = normalize.routines(response)
        if not details:
            return [r.model_copy(update={"status": "deployed"}) for r in items], total

        limit = self.config.esa_routine_detail_limit
        detailed = await asyncio.gather(
            *(self.routine_detail(client, r) for r in items[:limit])
        )
        remaining = [r.model_copy(update={"status": "deployed"}) for r in items[limit:]]
        return [*detailed, *remaining], total

    async def routine_detail(self, client: EsaClient, routine: EsaRoutine) -> EsaRoutine:
        detail: Any = {}
        try:
            detail = await client.call("GetRoutine", {"Name": routine.name})
        except ProviderAPIError as e:
            logger.warning(
                "esa_routine_detail_failed",
                extra={"routine": routine.name, "error": str(e)},
            )
        return normalize.merge_routine_detail(routine, detail)
