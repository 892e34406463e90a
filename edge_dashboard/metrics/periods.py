from enum import Enum
from typing import Iterable, List

from ..domain.models import MetricPoint


class Granularity(str, Enum):
    HOUR = "hour"
    DAY = "day"


class Period(str, Enum):
    ONE_DAY = "1day"
    THREE_DAYS = "3days"
    SEVEN_DAYS = "7days"
    THIRTY_DAYS = "30days"

    @property
    def granularity(self) -> Granularity:
        if self in (Period.ONE_DAY, Period.THREE_DAYS):
            return Granularity.HOUR
        return Granularity.DAY

    @property
    def window_size(self) -> int:
        return _WINDOW_SIZES[self]


_WINDOW_SIZES = {
    Period.ONE_DAY: 24,
    Period.THREE_DAYS: 72,
    Period.SEVEN_DAYS: 7,
    Period.THIRTY_DAYS: 30,
}


def select_window(points: Iterable[MetricPoint], period: Period) -> List[MetricPoint]:
    """Last ``min(len, window_size)`` points in ascending timestamp order.

    Timestamps are ISO-8601 strings of a single format per series, so string
    order is chronological order.
    """
    ordered = sorted(points, key=lambda p: p.timestamp)
    size = min(len(ordered), period.window_size)
    if size == 0:
        return []
    return ordered[-size:]
