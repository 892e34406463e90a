from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Sequence

import httpx

from ..core.config import Settings, settings
from ..core.logger import get_logger
from ..domain.edgeone import (
    EdgeOneAccount,
    EdgeOneTraffic,
    EdgeOneZonesReport,
    TrafficOverview,
)
from ..domain.models import AccountConfig
from ..infrastructure.edgeone.client import EdgeOneClient
from ..infrastructure.http import ProviderAPIError
from ..normalization import edgeone as normalize

logger = get_logger("edge_dashboard.services.edgeone")

DEFAULT_METRIC = "l7Flow_flux"

TIMING_ACTION = "DescribeTimingL7AnalysisData"
TOP_ACTION = "DescribeTopL7AnalysisData"
ORIGIN_PULL_ACTION = "DescribeTimingL7OriginPullData"
SECURITY_ACTION = "DescribeWebProtectionData"

ORIGIN_PULL_METRICS = frozenset(
    {
        "l7Flow_outFlux_hy",
        "l7Flow_outBandwidth_hy",
        "l7Flow_request_hy",
        "l7Flow_inFlux_hy",
        "l7Flow_inBandwidth_hy",
    }
)

SECURITY_METRICS = frozenset(
    {
        "ccAcl_interceptNum",
        "ccManage_interceptNum",
        "ccRate_interceptNum",
    }
)

_TOP_DIMENSIONS = (
    "country",
    "province",
    "statusCode",
    "domain",
    "url",
    "resourceType",
    "sip",
    "referer",
    "referers",
    "ua_device",
    "ua_browser",
    "ua_os",
    "ua",
)
TOP_ANALYSIS_METRICS = frozenset(
    f"l7Flow_{measure}_{dimension}"
    for measure in ("outFlux", "request")
    for dimension in _TOP_DIMENSIONS
)


class UnknownAccountError(LookupError):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def route_metric(metric: str) -> str:
    """EdgeOne action that serves ``metric``; unknown names use timing analysis."""
    if metric in TOP_ANALYSIS_METRICS:
        return TOP_ACTION
    if metric in ORIGIN_PULL_METRICS:
        return ORIGIN_PULL_ACTION
    if metric in SECURITY_METRICS:
        return SECURITY_ACTION
    return TIMING_ACTION


def traffic_request(
    metric: str,
    start_time: str,
    end_time: str,
    zone_ids: list[str],
    interval: str | None = None,
) -> tuple[str, dict[str, Any]]:
    action = route_metric(metric)
    payload: dict[str, Any] = {
        "StartTime": start_time,
        "EndTime": end_time,
        "ZoneIds": zone_ids,
    }
    if action == TOP_ACTION:
        payload["MetricName"] = metric
        return action, payload

    payload["MetricNames"] = [metric]
    if interval and interval != "auto":
        payload["Interval"] = interval
    return action, payload


class EdgeOneService:
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

    def client(self, account: AccountConfig) -> EdgeOneClient:
        return EdgeOneClient(self.http, account, self.config)

    async def collect_zones(self) -> EdgeOneZonesReport:
        """Zones and a 24h flux / request overview for every account."""
        results = await asyncio.gather(*(self.account_zones(a) for a in self.accounts))
        accounts = [a for a in results if a is not None]

        overview = TrafficOverview()
        for account in accounts:
            overview = overview.merge(account.overview)
        return EdgeOneZonesReport(
            accounts=accounts,
            zones=[z for a in accounts for z in a.zones],
            overview=overview,
        )

    async def account_zones(self, account: AccountConfig) -> EdgeOneAccount | None:
        client = self.client(account)
        try:
            response = await client.call("DescribeZones", {"Offset": 0, "Limit": 100})
        except ProviderAPIError as e:
            logger.error(
                "edgeone_zone_listing_failed",
                extra={"account": account.name, "error": str(e)},
            )
            return EdgeOneAccount(name=account.name, error=str(e))

        zones = [
            z for z in normalize.zones(response) if account.matches(z.zone_name, z.zone_id)
        ]
        zones = zones[: self.config.edgeone_max_zones]
        if not zones:
            logger.info("edgeone_account_without_zones", extra={"account": account.name})
            return None

        overview, error = await self.overview(client)
        return EdgeOneAccount(name=account.name, zones=zones, overview=overview, error=error)

    async def overview(self, client: EdgeOneClient) -> tuple[TrafficOverview, str | None]:
        now = self._now()
        start = _iso(now - timedelta(hours=self.config.edgeone_overview_hours))
        end = _iso(now)

        def _payload(metric: str) -> dict[str, Any]:
            return {
                "StartTime": start,
                "EndTime": end,
                "MetricNames": [metric],
                "ZoneIds": ["*"],
                "Interval": "hour",
            }

        flux, requests = await asyncio.gather(
            client.call(TIMING_ACTION, _payload("l7Flow_outFlux")),
            client.call(TIMING_ACTION, _payload("l7Flow_request")),
            return_exceptions=True,
        )
        error = None
        for result in (flux, requests):
            if isinstance(result, ProviderAPIError):
                logger.warning(
                    "edgeone_overview_failed",
                    extra={"account": client.account.name, "error": str(result)},
                )
                error = error or str(result)
            elif isinstance(result, BaseException):
                raise result

        return (
            TrafficOverview(
                total_flux=0 if isinstance(flux, BaseException) else normalize.timing_total(flux),
                total_requests=(
                    0 if isinstance(requests, BaseException) else normalize.timing_total(requests)
                ),
            ),
            error,
        )

    def resolve_account(self, name: str | None = None) -> AccountConfig:
        """Account called ``name`` (case-insensitive), else the first one."""
        if not name:
            return self.accounts[0]
        wanted = name.strip().lower()
        for account in self.accounts:
            if account.name.lower() == wanted:
                return account
        raise UnknownAccountError(f"EdgeOne account {name!r} is not configured")

    async def traffic(
        self,
        metric: str | None = None,
        zone_id: str | None = None,
        start_time: str | None = None,
        end_time: str | None = None,
        interval: str | None = None,
        account_name: str | None = None,
    ) -> EdgeOneTraffic:
        account = self.resolve_account(account_name)
        metric = metric or DEFAULT_METRIC
        now = self._now()
        start_time = start_time or _iso(now - timedelta(hours=24))
        end_time = end_time or _iso(now)
        zone_ids = [zone_id] if zone_id else ["*"]

        action, payload = traffic_request(metric, start_time, end_time, zone_ids, interval)
        result = EdgeOneTraffic(
            account=account.name,
            metric=metric,
            action=action,
            zone_ids=zone_ids,
            start_time=start_time,
            end_time=end_time,
            interval=payload.get("Interval"),
        )
        try:
            response = await self.client(account).call(action, payload)
        except ProviderAPIError as e:
            logger.error(
                "edgeone_traffic_failed",
                extra={"account": account.name, "metric": metric, "error": str(e)},
            )
            result.error = str(e)
            return result

        if action == TOP_ACTION:
            result.top = normalize.top_entries(response, self.config.edgeone_top_n)
            result.total = normalize.top_total(response)
        else:
            result.series = normalize.timing_series(response)
            result.total = normalize.timing_total(response)
        return result
