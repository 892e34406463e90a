import json
from datetime import datetime, timezone

import httpx
import pytest

from edge_dashboard.services.edgeone import (
    ORIGIN_PULL_ACTION,
    SECURITY_ACTION,
    TIMING_ACTION,
    TOP_ACTION,
    EdgeOneService,
    UnknownAccountError,
    route_metric,
    traffic_request,
)

NOW = datetime(2024, 3, 1, 0, 0, 0, tzinfo=timezone.utc)

ZONES = {
    "Zones": [
        {"ZoneId": "zone-1", "ZoneName": "a.com", "Status": "active", "ActiveStatus": "active"},
        {"ZoneId": "zone-2", "ZoneName": "b.com", "Status": "pending"},
    ]
}


def timing(value):
    return {"Data": [{"TypeValue": [{"Detail": [{"Timestamp": 1709251200, "Value": value}]}]}]}


def edgeone_transport(json_response, responses, captured=None):
    def handler(request: httpx.Request) -> httpx.Response:
        action = request.headers["X-TC-Action"]
        payload = json.loads(request.content)
        if captured is not None:
            captured.append((action, payload))
        body = responses(action, payload)
        return json_response({"Response": {**body, "RequestId": "req"}})

    return httpx.MockTransport(handler)


class TestMetricRouting:
    @pytest.mark.parametrize(
        "metric, action",
        [
            ("l7Flow_outFlux_country", TOP_ACTION),
            ("l7Flow_request_ua_browser", TOP_ACTION),
            ("l7Flow_inFlux_hy", ORIGIN_PULL_ACTION),
            ("ccRate_interceptNum", SECURITY_ACTION),
            ("l7Flow_flux", TIMING_ACTION),
            ("anything_else", TIMING_ACTION),
        ],
    )
    def test_route_metric(self, metric, action):
        assert route_metric(metric) == action

    def test_top_request_uses_single_metric_name(self):
        action, payload = traffic_request("l7Flow_request_domain", "s", "e", ["*"], interval="hour")
        assert action == TOP_ACTION
        assert payload == {"StartTime": "s", "EndTime": "e", "ZoneIds": ["*"], "MetricName": "l7Flow_request_domain"}

    def test_auto_interval_is_dropped(self):
        _, auto = traffic_request("l7Flow_flux", "s", "e", ["z"], interval="auto")
        _, day = traffic_request("l7Flow_flux", "s", "e", ["z"], interval="day")
        assert "Interval" not in auto
        assert day["Interval"] == "day"
        assert day["MetricNames"] == ["l7Flow_flux"]


class TestCollectZones:
    @pytest.mark.asyncio
    async def test_zones_with_overview(self, make_account, test_settings, json_response):
        captured = []

        def responses(action, payload):
            if action == "DescribeZones":
                return ZONES
            return timing(100 if payload["MetricNames"] == ["l7Flow_outFlux"] else 7)

        transport = edgeone_transport(json_response, responses, captured)
        accounts = [make_account(name="First"), make_account(name="Second", scope="B.com")]
        async with httpx.AsyncClient(transport=transport) as http:
            service = EdgeOneService(http, accounts, test_settings, now=lambda: NOW)
            report = await service.collect_zones()

        first, second = report.accounts
        assert [z.zone_name for z in first.zones] == ["a.com", "b.com"]
        assert [z.zone_name for z in second.zones] == ["b.com"]
        assert first.zones[1].display_status == "pending"
        assert first.overview.total_flux == 100
        assert first.overview.total_requests == 7
        assert report.overview.total_flux == 200
        assert len(report.zones) == 3

        overview_calls = [p for a, p in captured if a == "DescribeTimingL7AnalysisData"]
        assert overview_calls[0]["StartTime"] == "2024-02-29T00:00:00Z"
        assert overview_calls[0]["ZoneIds"] == ["*"]
        assert overview_calls[0]["Interval"] == "hour"

    @pytest.mark.asyncio
    async def test_overview_failure_keeps_zones(self, make_account, test_settings, json_response):
        def responses(action, payload):
            if action == "DescribeZones":
                return ZONES
            return {"Error": {"Code": "LimitExceeded", "Message": "slow down"}}

        async with httpx.AsyncClient(transport=edgeone_transport(json_response, responses)) as http:
            report = await EdgeOneService(http, [make_account()], test_settings).collect_zones()

        (account,) = report.accounts
        assert len(account.zones) == 2
        assert "LimitExceeded" in account.error
        assert account.overview.total_flux == 0

    @pytest.mark.asyncio
    async def test_zone_cap(self, make_account, test_settings, json_response):
        many = {"Zones": [{"ZoneId": f"z{i}", "ZoneName": f"s{i}.com"} for i in range(15)]}

        def responses(action, payload):
            return many if action == "DescribeZones" else timing(0)

        async with httpx.AsyncClient(transport=edgeone_transport(json_response, responses)) as http:
            report = await EdgeOneService(http, [make_account()], test_settings).collect_zones()

        assert len(report.zones) == 10


class TestTraffic:
    @pytest.mark.asyncio
    async def test_timing_metric(self, make_account, test_settings, json_response):
        captured = []
        transport = edgeone_transport(json_response, lambda a, p: timing(42), captured)
        async with httpx.AsyncClient(transport=transport) as http:
            service = EdgeOneService(http, [make_account()], test_settings, now=lambda: NOW)
            result = await service.traffic(metric="l7Flow_request", zone_id="zone-1", interval="auto")

        (action, payload), = captured
        assert action == TIMING_ACTION
        assert payload["ZoneIds"] == ["zone-1"]
        assert payload["EndTime"] == "2024-03-01T00:00:00Z"
        assert result.total == 42
        assert result.series[0].time == "2024-03-01T00:00:00Z"
        assert result.interval is None

    @pytest.mark.asyncio
    async def test_top_metric_on_named_account(self, make_account, test_settings, json_response):
        def responses(action, payload):
            assert action == TOP_ACTION
            return {"Data": [{"DetailData": [{"Key": "CN", "Value": 5}, {"Key": "US", "Value": 9}]}]}

        accounts = [make_account(name="One"), make_account(name="Two")]
        async with httpx.AsyncClient(transport=edgeone_transport(json_response, responses)) as http:
            result = await EdgeOneService(http, accounts, test_settings).traffic(
                metric="l7Flow_outFlux_country", account_name="two"
            )

        assert result.account == "Two"
        assert [e.key for e in result.top] == ["US", "CN"]
        assert result.total == 14
        assert result.zone_ids == ["*"]

    @pytest.mark.asyncio
    async def test_vendor_error_is_inline(self, make_account, test_settings, json_response):
        transport = edgeone_transport(
            json_response, lambda a, p: {"Error": {"Code": "InvalidParameter", "Message": "bad metric"}}
        )
        async with httpx.AsyncClient(transport=transport) as http:
            result = await EdgeOneService(http, [make_account()], test_settings).traffic()

        assert result.metric == "l7Flow_flux"
        assert "InvalidParameter: bad metric" in result.error

    def test_unknown_account(self, make_account, test_settings):
        service = EdgeOneService(None, [make_account(name="One")], test_settings)
        with pytest.raises(UnknownAccountError):
            service.resolve_account("missing")
