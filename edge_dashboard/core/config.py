from pydantic_settings import BaseSettings

from edge_shared.config import BaseServiceConfig


class Settings(BaseServiceConfig, BaseSettings):
    # Cloudflare
    cloudflare_api_base: str = "https://api.cloudflare.com/client/v4"
    cloudflare_graphql_timeout_seconds: float = 30.0
    cloudflare_zone_page_size: int = 50
    cloudflare_max_unscoped_zones: int = 20  # cap when no CF_DOMAINS filter is set
    cloudflare_daily_lookback_days: int = 45
    cloudflare_hourly_lookback_days: int = 3
    cloudflare_geo_top_n: int = 15
    cloudflare_workers_lookback_hours: int = 24

    # Tencent EdgeOne
    edgeone_host: str = "teo.tencentcloudapi.com"
    edgeone_region: str = "ap-guangzhou"
    edgeone_version: str = "2022-09-01"
    edgeone_max_zones: int = 10
    edgeone_overview_hours: int = 24
    edgeone_top_n: int = 10

    # Aliyun ESA
    esa_endpoint: str = "esa.cn-hangzhou.aliyuncs.com"
    esa_version: str = "2024-09-10"
    esa_max_sites: int = 20
    esa_max_routines: int = 20
    esa_routine_detail_limit: int = 5
    esa_routine_page_size: int = 50
    esa_timeseries_hours: int = 24
    esa_quota_names: list[str] = [
        "customHttpCert",
        "transition_rule",
        "cache_rules|rule_quota",
        "redirect_rules|rule_quota",
        "origin_rules|rule_quota",
    ]

    otel_service_name: str = "edge-dashboard"


settings = Settings()
