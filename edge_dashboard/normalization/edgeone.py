"""EdgeOne ``Describe*`` responses to the unified schema."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable

from ..domain.edgeone import EdgeOneZone
from ..domain.models import SeriesPoint, TopNEntry
from ..metrics.aggregation import accumulate, rank
from .fields import pick, pick_list, pick_number, pick_str, to_number


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None]


def zone(raw: Any) -> EdgeOneZone:
    status = pick_str(raw, "Status")
    active_status = pick_str(raw, "ActiveStatus")
    return EdgeOneZone(
        zone_id=pick_str(raw, "ZoneId"),
        zone_name=pick_str(raw, "ZoneName"),
        status=status,
        active_status=active_status,
        # ActiveStatus reflects whether the zone is really serving
        display_status=active_status or status,
        type=pick_str(raw, "Type"),
        area=pick_str(raw, "Area"),
        paused=bool(pick(raw, "Paused", default=False)),
        cname_status=pick_str(raw, "CnameStatus"),
        name_servers=_str_list(pick(raw, "NameServers")),
        original_name_servers=_str_list(pick(raw, "OriginalNameServers")),
        create_time=pick_str(raw, "CreatedOn", "CreateTime"),
    )


def zones(response: Any) -> list[EdgeOneZone]:
    return [zone(raw) for raw in pick_list(response, "Zones")]


def _timestamp(value: Any) -> str:
    """Unix seconds become ISO-8601 UTC; strings pass through."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    return "" if value is None else str(value)


def _timing_details(response: Any) -> Iterable[Any]:
    """Every detail point across ``Data[].TypeValue[].Detail[]``.

    Web protection data has no ``TypeValue`` level; the record itself is used.
    """
    for record in pick_list(response, "Data", "TimingDataRecords"):
        type_values = pick_list(record, "TypeValue") or [record]
        for type_value in type_values:
            yield from pick_list(type_value, "Detail", "DetailData")


def timing_series(response: Any) -> list[SeriesPoint]:
    """Points summed per timestamp across zones, in ascending time order."""
    buckets = accumulate(
        _timing_details(response),
        key=lambda d: _timestamp(pick(d, "Timestamp", "Time")),
        fields={"value": lambda d: pick_number(d, "Value")},
    )
    return [
        SeriesPoint(time=t, value=to_number(sums["value"]))
        for t, sums in sorted(buckets.items())
    ]


def timing_total(response: Any) -> int | float:
    return to_number(sum(pick_number(d, "Value") for d in _timing_details(response)))


def top_entries(response: Any, limit: int) -> list[TopNEntry]:
    rows = (
        detail
        for record in pick_list(response, "Data")
        for detail in pick_list(record, "DetailData", "Detail")
    )
    buckets = accumulate(
        rows,
        key=lambda d: pick_str(d, "Key", "Name"),
        fields={"value": lambda d: pick_number(d, "Value")},
    )
    return [
        TopNEntry(key=k, value=to_number(v["value"])) for k, v in rank(buckets, "value", limit)
    ]


def top_total(response: Any) -> int | float:
    """Sum of every ranked row before truncation."""
    return to_number(
        sum(
            pick_number(detail, "Value")
            for record in pick_list(response, "Data")
            for detail in pick_list(record, "DetailData", "Detail")
        )
    )
