from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Sequence

import httpx

from ..core.config import Settings, settings
from ..core.logger import get_logger
from ..domain.cloudflare import (
    CloudflareAccountAnalytics,
    CloudflareAnalyticsReport,
    CloudflareZone,
    WorkersAccountStats,
    WorkersReport,
    ZoneAnalytics,
)
from ..domain.models import AccountConfig
from ..infrastructure.cloudflare import queries
from ..infrastructure.cloudflare.client import CloudflareClient
from ..infrastructure.http import ProviderAPIError
from ..metrics.aggregation import merge_totals, summarize_period
from ..metrics.periods import Period
from ..normalization import cloudflare as normalize
from ..normalization.fields import pick_list

logger = get_logger("edge_dashboard.services.cloudflare")

NO_MATCHING_ZONES = "no matching zones found for the configured domains"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def _raise_unexpected(results: Sequence[object]) -> None:
    for result in results:
        if isinstance(result, BaseException) and not isinstance(result, ProviderAPIError):
            raise result


class CloudflareAnalyticsService:
    """Zone analytics and Workers statistics across Cloudflare accounts.

    Vendor failures are caught at the smallest unit they affect (zone for
    GraphQL, account for zone listing) and reported inline as ``error``.
    Anything else propagates to the handler.
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

    def client(self, account: AccountConfig) -> CloudflareClient:
        return CloudflareClient(self.http, account, self.config)

    def select_zones(
        self, account: AccountConfig, zones: Sequence[CloudflareZone]
    ) -> list[CloudflareZone]:
        """Zones named in the account scope, or the first page-worth when unscoped."""
        if account.is_scoped:
            return [z for z in zones if account.matches(z.name)]
        return list(zones[: self.config.cloudflare_max_unscoped_zones])

    async def collect(self, period: Period) -> CloudflareAnalyticsReport:
        results = await asyncio.gather(
            *(self.collect_account(account, period) for account in self.accounts)
        )
        accounts = [a for a in results if a is not None]
        report = CloudflareAnalyticsReport(
            period=period.value,
            accounts=accounts,
            totals=merge_totals((a.totals for a in accounts), period),
        )
        if not accounts:
            report.error = NO_MATCHING_ZONES
        return report

    async def collect_account(
        self, account: AccountConfig, period: Period
    ) -> CloudflareAccountAnalytics | None:
        """Analytics for one account; ``None`` when no zone survives the filter."""
        client = self.client(account)
        try:
            zones = await client.list_zones()
        except ProviderAPIError as e:
            logger.error(
                "cloudflare_zone_listing_failed",
                extra={"account": account.name, "error": str(e)},
            )
            return CloudflareAccountAnalytics(name=account.name, error=str(e))

        selected = self.select_zones(account, zones)
        if not selected:
            logger.info(
                "cloudflare_account_without_zones",
                extra={"account": account.name, "listed": len(zones)},
            )
            return None

        zone_results = await asyncio.gather(
            *(self.fetch_zone(client, zone, period) for zone in selected)
        )
        return CloudflareAccountAnalytics(
            name=account.name,
            zones=list(zone_results),
            totals=merge_totals((z.summary for z in zone_results), period),
        )

    async def fetch_zone(
        self, client: CloudflareClient, zone: CloudflareZone, period: Period
    ) -> ZoneAnalytics:
        now = self._now()
        daily_vars = {
            "zone": zone.id,
            "since": (now - timedelta(days=self.config.cloudflare_daily_lookback_days))
            .date()
            .isoformat(),
            "until": now.date().isoformat(),
        }
        hourly_vars = {
            "zone": zone.id,
            "since": _iso(now - timedelta(days=self.config.cloudflare_hourly_lookback_days)),
            "until": _iso(now),
        }

        daily_doc, hourly_doc, geo_doc = await asyncio.gather(
            client.graphql(queries.ZONE_DAILY, daily_vars, action="httpRequests1dGroups"),
            client.graphql(queries.ZONE_HOURLY, hourly_vars, action="httpRequests1hGroups"),
            client.graphql(queries.ZONE_GEOGRAPHY, daily_vars, action="countryMap"),
            return_exceptions=True,
        )
        _raise_unexpected((daily_doc, hourly_doc, geo_doc))

        failures = [
            r for r in (daily_doc, hourly_doc, geo_doc) if isinstance(r, ProviderAPIError)
        ]
        for failure in failures:
            logger.warning(
                "cloudflare_zone_query_failed",
                extra={"zone": zone.name, "action": failure.action, "error": failure.message},
            )

        def _groups(doc: object, dataset: str) -> list:
            return [] if isinstance(doc, BaseException) else normalize.zone_groups(doc, dataset)

        daily = sorted(
            normalize.metric_points(_groups(daily_doc, "httpRequests1dGroups")),
            key=lambda p: p.timestamp,
        )
        hourly = sorted(
            normalize.metric_points(_groups(hourly_doc, "httpRequests1hGroups")),
            key=lambda p: p.timestamp,
        )
        return ZoneAnalytics(
            domain=zone.name,
            zone_id=zone.id,
            daily=daily,
            hourly=hourly,
            geography=normalize.rank_countries(
                _groups(geo_doc, "httpRequests1dGroups"), self.config.cloudflare_geo_top_n
            ),
            summary=summarize_period(daily, hourly, period),
            error=str(failures[0]) if failures else None,
        )

    async def collect_workers(self) -> WorkersReport:
        stats = await asyncio.gather(*(self.account_workers(a) for a in self.accounts))
        return WorkersReport(
            accounts=list(stats),
            total_requests=sum(s.total_requests for s in stats),
            total_errors=sum(s.total_errors for s in stats),
        )

    async def account_workers(self, account: AccountConfig) -> WorkersAccountStats:
        """Workers invocations over the lookback window for one account.

        The account id has to be known before the analytics query is sent.
        """
        client = self.client(account)
        try:
            account_id = await client.resolve_account_id()
            if not account_id:
                return WorkersAccountStats(
                    account=account.name, error="no Cloudflare account id available"
                )

            now = self._now()
            start = now - timedelta(hours=self.config.cloudflare_workers_lookback_hours)
            doc = await client.graphql(
                queries.WORKERS_INVOCATIONS,
                {
                    "accountTag": account_id,
                    "datetimeStart": _iso(start),
                    "datetimeEnd": _iso(now),
                },
                action="workersInvocationsAdaptive",
            )
        except ProviderAPIError as e:
            logger.error(
                "cloudflare_workers_failed",
                extra={"account": account.name, "error": str(e)},
            )
            return WorkersAccountStats(account=account.name, error=str(e))

        workers = normalize.worker_stats(
            pick_list(doc, "data.viewer.accounts.0.workersInvocationsAdaptive")
        )
        return WorkersAccountStats(
            account=account.name,
            account_id=account_id,
            workers=workers,
            total_requests=sum(w.requests for w in workers),
            total_errors=sum(w.errors for w in workers),
        )
