import base64

from edge_dashboard.domain.esa import EsaRoutine
from edge_dashboard.normalization import cloudflare, edgeone, esa


class TestCloudflareNormalizer:
    def test_metric_point_defaults_missing_counters(self):
        point = cloudflare.metric_point(
            {"dimensions": {"date": "2024-01-02"}, "sum": {"requests": 10, "bytes": None}}
        )
        assert point.timestamp == "2024-01-02"
        assert point.requests == 10
        assert point.bytes == 0
        assert point.cached_bytes == 0

    def test_rank_countries_merges_days_and_drops_unknown(self):
        groups = [
            {
                "sum": {
                    "countryMap": [
                        {"clientCountryName": "US", "requests": 5, "bytes": 50, "threats": 1},
                        {"clientCountryName": "Unknown", "requests": 100},
                        {"clientCountryName": "DE", "requests": 3},
                    ]
                }
            },
            {
                "sum": {
                    "countryMap": [
                        {"clientCountryName": "DE", "requests": 4},
                        {"clientCountryName": "", "requests": 50},
                    ]
                }
            },
        ]
        ranked = cloudflare.rank_countries(groups, limit=15)

        assert [(c.country, c.requests) for c in ranked] == [("DE", 7), ("US", 5)]
        assert ranked[1].bytes == 50

    def test_rank_countries_truncates(self):
        rows = [{"clientCountryName": f"C{i}", "requests": i} for i in range(20)]
        ranked = cloudflare.rank_countries([{"sum": {"countryMap": rows}}], limit=15)
        assert len(ranked) == 15
        assert ranked[0].country == "C19"

    def test_worker_stats(self):
        invocations = [
            {
                "dimensions": {"scriptName": "api"},
                "sum": {"requests": 10, "errors": 1, "subrequests": 2},
                "quantiles": {"cpuTimeP50": 1.5, "cpuTimeP99": 9.0},
            },
            {
                "dimensions": {"scriptName": "api"},
                "sum": {"requests": 5, "errors": 0, "subrequests": 1},
                "quantiles": {"cpuTimeP50": 2.5, "cpuTimeP99": 4.0},
            },
            {"dimensions": {}, "sum": {"requests": 20}},
        ]
        stats = cloudflare.worker_stats(invocations)

        assert [w.script_name for w in stats] == ["unknown", "api"]
        api = stats[1]
        assert (api.requests, api.errors, api.subrequests) == (15, 1, 3)
        assert (api.cpu_time_p50, api.cpu_time_p99) == (2.5, 9.0)


class TestEdgeOneNormalizer:
    def test_zone_display_status_prefers_active_status(self):
        zone = edgeone.zone({"ZoneId": "z", "ZoneName": "a.com", "Status": "active", "ActiveStatus": "inactive"})
        assert zone.display_status == "inactive"
        assert edgeone.zone({"Status": "pending"}).display_status == "pending"

    def test_timing_series_sums_per_timestamp(self):
        response = {
            "Data": [
                {"TypeValue": [{"Detail": [{"Timestamp": 1700000000, "Value": 5}, {"Timestamp": 1700003600, "Value": 1}]}]},
                {"TypeValue": [{"Detail": [{"Timestamp": 1700000000, "Value": 2}]}]},
            ]
        }
        series = edgeone.timing_series(response)

        assert [(p.time, p.value) for p in series] == [
            ("2023-11-14T22:13:20Z", 7),
            ("2023-11-14T23:13:20Z", 1),
        ]
        assert edgeone.timing_total(response) == 8

    def test_web_protection_records_without_type_value(self):
        response = {"Data": [{"Detail": [{"Timestamp": 1700000000, "Value": 3}]}]}
        assert edgeone.timing_total(response) == 3

    def test_top_entries(self):
        response = {
            "Data": [
                {"DetailData": [{"Key": "CN", "Value": 10}, {"Key": "US", "Value": 30}]},
                {"DetailData": [{"Key": "CN", "Value": 25}, {"Key": "", "Value": 99}]},
            ]
        }
        top = edgeone.top_entries(response, limit=1)

        assert [(e.key, e.value) for e in top] == [("CN", 35)]
        assert edgeone.top_total(response) == 164

    def test_garbage_input(self):
        assert edgeone.zones("not a document") == []
        assert edgeone.timing_series(None) == []


class TestEsaNormalizer:
    def test_site_uses_alternate_spellings(self):
        site = esa.site(
            {
                "siteId": 101,
                "Name": "example.com",
                "ratePlanType": "basic",
                "nameServers": ["ns1.example", "ns2.example"],
                "domainCount": "3",
            }
        )
        assert site.site_id == "101"
        assert site.site_name == "example.com"
        assert site.plan_type == "basic"
        assert site.name_server_list == "ns1.example,ns2.example"
        assert site.domain_count == 3
        assert site.status == ""

    def test_raw_sites_through_wrappers(self):
        assert esa.raw_sites({"Result": {"Sites": {"Site": [{"SiteId": 1}]}}}) == [{"SiteId": 1}]
        assert esa.raw_sites({"sites": [{"SiteId": 2}]}) == [{"SiteId": 2}]

    def test_quotas(self):
        (quota,) = esa.quotas({"Quotas": [{"QuotaName": "customHttpCert", "QuotaValue": "10", "Usage": 2}]})
        assert (quota.quota_name, quota.total, quota.used) == ("customHttpCert", 10, 2)

    def test_routines_count_fallback(self):
        items, total = esa.routines({"Routines": [{"RoutineName": "r1"}, {"Name": "r2"}]})
        assert [r.name for r in items] == ["r1", "r2"]
        assert total == 2

    def test_merge_routine_detail(self):
        detail = {
            "Description": base64.b64encode("edge api".encode()).decode(),
            "CreateTime": "2024-05-01",
            "Envs": [
                {"Env": "staging"},
                {"Env": "production", "CodeDeploy": {"CodeVersions": [{"CodeVersion": 1714}]}},
            ],
        }
        merged = esa.merge_routine_detail(EsaRoutine(name="r1", status="Creating"), detail)

        assert merged.description == "edge api"
        assert merged.env == "production"
        assert merged.code_version == "1714"
        assert merged.status == "deployed"
        assert merged.create_time == "2024-05-01"

    def test_plain_description_kept(self):
        assert esa.decode_description("not base64!") == "not base64!"

    def test_time_series(self):
        response = {
            "SummarizedData": [
                {"FieldName": "Requests", "Value": 120},
                {"FieldName": "Traffic", "Value": "2048"},
            ],
            "Data": [
                {"FieldName": "Requests", "DetailData": [{"TimeStamp": "2024-01-01T00:00:00Z", "Value": 60}]},
                {"fieldName": "Traffic", "detailData": [{"timeStamp": "2024-01-01T00:00:00Z", "value": 1024}]},
            ],
        }
        series = esa.time_series(response)

        assert series["requests"] == 120
        assert series["bytes"] == 2048
        assert series["requests_series"][0].value == 60
        assert series["traffic_series"][0].time == "2024-01-01T00:00:00Z"

    def test_instance_ids(self):
        assert esa.instance_id({}, {"instanceId": "esa-2"}) == "esa-2"
        assert esa.first_instance_id({"Result": {"Instances": [{"InstanceId": "esa-9"}]}}) == "esa-9"
        assert esa.first_instance_id({}) == ""
