"""Cloudflare REST / GraphQL payloads to the unified schema."""

from __future__ import annotations

from typing import Any, Iterable

from ..domain.cloudflare import CloudflareZone, CountryStat, WorkerStats
from ..domain.models import MetricPoint
from ..metrics.aggregation import accumulate, rank
from .fields import pick_int, pick_list, pick_number, pick_str

UNKNOWN_COUNTRIES = {"", "Unknown"}


def zone(raw: Any) -> CloudflareZone:
    return CloudflareZone(
        id=pick_str(raw, "id"),
        name=pick_str(raw, "name"),
        status=pick_str(raw, "status"),
        account_id=pick_str(raw, "account.id"),
        account_name=pick_str(raw, "account.name"),
    )


def zone_groups(document: Any, dataset: str) -> list:
    """Rows of ``dataset`` for the first zone in a GraphQL response."""
    return pick_list(document, f"data.viewer.zones.0.{dataset}")


def metric_point(group: Any) -> MetricPoint:
    return MetricPoint(
        timestamp=pick_str(group, "dimensions.datetime", "dimensions.date"),
        requests=pick_int(group, "sum.requests"),
        bytes=pick_int(group, "sum.bytes"),
        threats=pick_int(group, "sum.threats"),
        cached_requests=pick_int(group, "sum.cachedRequests"),
        cached_bytes=pick_int(group, "sum.cachedBytes"),
    )


def metric_points(groups: Iterable[Any]) -> list[MetricPoint]:
    return [metric_point(g) for g in groups]


def country_rows(groups: Iterable[Any]) -> Iterable[Any]:
    for group in groups:
        yield from pick_list(group, "sum.countryMap")


def rank_countries(groups: Iterable[Any], limit: int) -> list[CountryStat]:
    """Sum ``countryMap`` rows across days and keep the top ``limit`` by requests."""
    buckets = accumulate(
        country_rows(groups),
        key=lambda row: pick_str(row, "clientCountryName"),
        fields={
            "requests": lambda row: pick_int(row, "requests"),
            "bytes": lambda row: pick_int(row, "bytes"),
            "threats": lambda row: pick_int(row, "threats"),
        },
        skip=lambda country: country in UNKNOWN_COUNTRIES,
    )
    return [
        CountryStat(country=country, **sums)
        for country, sums in rank(buckets, "requests", limit)
    ]


def worker_stats(invocations: Iterable[Any]) -> list[WorkerStats]:
    """One row per script: summed counters, highest CPU quantiles seen."""
    stats: dict[str, WorkerStats] = {}
    for inv in invocations:
        name = pick_str(inv, "dimensions.scriptName") or "unknown"
        current = stats.setdefault(name, WorkerStats(script_name=name))
        current.requests += pick_int(inv, "sum.requests")
        current.errors += pick_int(inv, "sum.errors")
        current.subrequests += pick_int(inv, "sum.subrequests")
        current.cpu_time_p50 = max(
            current.cpu_time_p50, float(pick_number(inv, "quantiles.cpuTimeP50"))
        )
        current.cpu_time_p99 = max(
            current.cpu_time_p99, float(pick_number(inv, "quantiles.cpuTimeP99"))
        )
    return sorted(stats.values(), key=lambda w: w.requests, reverse=True)
