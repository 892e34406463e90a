import pytest

from edge_dashboard.domain.models import MetricPoint
from edge_dashboard.metrics.aggregation import (
    cache_hit_rate,
    merge_totals,
    summarize,
    summarize_period,
    top_n,
)
from edge_dashboard.metrics.periods import Granularity, Period, select_window


def _daily(count):
    return [
        MetricPoint(
            timestamp=f"2024-01-{day:02d}",
            requests=day,
            bytes=100,
            cached_bytes=25,
        )
        for day in range(1, count + 1)
    ]


class TestPeriods:
    @pytest.mark.parametrize(
        "period, granularity, size",
        [
            (Period.ONE_DAY, Granularity.HOUR, 24),
            (Period.THREE_DAYS, Granularity.HOUR, 72),
            (Period.SEVEN_DAYS, Granularity.DAY, 7),
            (Period.THIRTY_DAYS, Granularity.DAY, 30),
        ],
    )
    def test_window_definition(self, period, granularity, size):
        assert period.granularity is granularity
        assert period.window_size == size

    def test_select_window_sorts_before_slicing(self):
        points = list(reversed(_daily(30)))
        window = select_window(points, Period.SEVEN_DAYS)
        assert [p.requests for p in window] == [24, 25, 26, 27, 28, 29, 30]

    def test_oversized_window_keeps_everything(self):
        assert len(select_window(_daily(10), Period.THIRTY_DAYS)) == 10
        assert select_window([], Period.ONE_DAY) == []


class TestSummaries:
    def test_seven_days_of_thirty_day_series(self):
        totals = summarize(select_window(_daily(30), Period.SEVEN_DAYS), Period.SEVEN_DAYS)

        assert totals.requests == 189
        assert totals.points == 7
        assert totals.bytes == 700
        assert totals.cache_hit_rate == 25.0

    def test_oversized_window_sums_all(self):
        totals = summarize_period(_daily(5), [], Period.THIRTY_DAYS)
        assert totals.requests == 15
        assert totals.granularity == "day"

    def test_short_periods_use_hourly_series(self):
        hourly = [MetricPoint(timestamp=f"2024-01-01T{h:02d}:00:00Z", requests=1) for h in range(24)]
        hourly += [MetricPoint(timestamp=f"2023-12-31T{h:02d}:00:00Z", requests=100) for h in range(24)]

        totals = summarize_period(_daily(30), hourly, Period.ONE_DAY)
        assert totals.requests == 24
        assert totals.granularity == "hour"

    def test_merge_totals_skips_missing(self):
        a = summarize(_daily(2), Period.SEVEN_DAYS)
        b = summarize(_daily(3), Period.SEVEN_DAYS)
        merged = merge_totals([a, None, b], Period.SEVEN_DAYS)

        assert merged.requests == 3 + 6
        assert merged.points == 5
        assert merged.cache_hit_rate == 25.0


class TestCacheHitRate:
    def test_zero_bytes_is_exactly_zero(self):
        assert cache_hit_rate(0, 0) == 0
        assert cache_hit_rate(10, 0) == 0

    def test_rounded_percentage(self):
        assert cache_hit_rate(1, 3) == 33.33


def test_top_n_accumulates_then_ranks():
    rows = [("cn", 5), ("us", 4), ("cn", 1), ("de", 9), ("", 100)]
    top = top_n(rows, key=lambda r: r[0], value=lambda r: r[1], limit=2)
    assert [(e.key, e.value) for e in top] == [("de", 9), ("cn", 6)]
