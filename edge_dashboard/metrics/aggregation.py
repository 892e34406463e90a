from typing import Any, Callable, Dict, Iterable, List, Sequence

from ..domain.models import MetricPoint, PeriodTotals, TopNEntry
from .periods import Granularity, Period, select_window

_SUM_FIELDS = ("requests", "bytes", "threats", "cached_requests", "cached_bytes")


def cache_hit_rate(cached_bytes: float, total_bytes: float) -> float:
    """Percentage of bytes served from cache; 0 when nothing was served."""
    if total_bytes <= 0:
        return 0.0
    return round(cached_bytes / total_bytes * 100, 2)


def summarize(points: Sequence[MetricPoint], period: Period) -> PeriodTotals:
    sums = {field: 0 for field in _SUM_FIELDS}
    for point in points:
        for field in _SUM_FIELDS:
            sums[field] += getattr(point, field)
    return PeriodTotals(
        period=period.value,
        granularity=period.granularity.value,
        points=len(points),
        cache_hit_rate=cache_hit_rate(sums["cached_bytes"], sums["bytes"]),
        **sums,
    )


def summarize_period(
    daily: Sequence[MetricPoint],
    hourly: Sequence[MetricPoint],
    period: Period,
) -> PeriodTotals:
    """Totals for ``period`` using hourly data for short windows, daily otherwise."""
    series = hourly if period.granularity is Granularity.HOUR else daily
    return summarize(select_window(series, period), period)


def merge_totals(totals: Iterable[PeriodTotals | None], period: Period) -> PeriodTotals:
    sums = {field: 0 for field in _SUM_FIELDS}
    points = 0
    for item in totals:
        if item is None:
            continue
        points += item.points
        for field in _SUM_FIELDS:
            sums[field] += getattr(item, field)
    return PeriodTotals(
        period=period.value,
        granularity=period.granularity.value,
        points=points,
        cache_hit_rate=cache_hit_rate(sums["cached_bytes"], sums["bytes"]),
        **sums,
    )


def accumulate(
    rows: Iterable[Any],
    key: Callable[[Any], str],
    fields: Dict[str, Callable[[Any], float]],
    skip: Callable[[str], bool] = lambda k: not k,
) -> Dict[str, Dict[str, float]]:
    """Sum every field of ``rows`` into buckets keyed by ``key(row)``.

    Rows whose key fails ``skip`` are ignored. Bucket insertion order follows
    first appearance.
    """
    buckets: Dict[str, Dict[str, float]] = {}
    for row in rows:
        k = key(row)
        if skip(k):
            continue
        bucket = buckets.setdefault(k, {name: 0 for name in fields})
        for name, getter in fields.items():
            bucket[name] += getter(row)
    return buckets


def rank(
    buckets: Dict[str, Dict[str, float]], by: str, limit: int
) -> List[tuple[str, Dict[str, float]]]:
    """Buckets sorted by ``by`` descending, truncated to ``limit``."""
    ordered = sorted(buckets.items(), key=lambda item: item[1][by], reverse=True)
    return ordered[: max(limit, 0)]


def top_n(
    rows: Iterable[Any],
    key: Callable[[Any], str],
    value: Callable[[Any], float],
    limit: int,
) -> List[TopNEntry]:
    buckets = accumulate(rows, key, {"value": value})
    return [TopNEntry(key=k, value=v["value"]) for k, v in rank(buckets, "value", limit)]
