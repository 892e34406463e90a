from pydantic import BaseModel, Field

from .models import MetricPoint, PeriodTotals


class CloudflareZone(BaseModel):
    id: str
    name: str
    status: str = ""
    account_id: str = ""
    account_name: str = ""


class CountryStat(BaseModel):
    country: str
    requests: int = 0
    bytes: int = 0
    threats: int = 0


class ZoneAnalytics(BaseModel):
    domain: str
    zone_id: str = ""
    daily: list[MetricPoint] = Field(default_factory=list)
    hourly: list[MetricPoint] = Field(default_factory=list)
    geography: list[CountryStat] = Field(default_factory=list)
    summary: PeriodTotals | None = None
    error: str | None = None


class CloudflareAccountAnalytics(BaseModel):
    name: str
    zones: list[ZoneAnalytics] = Field(default_factory=list)
    totals: PeriodTotals | None = None
    error: str | None = None


class CloudflareAnalyticsReport(BaseModel):
    period: str
    accounts: list[CloudflareAccountAnalytics] = Field(default_factory=list)
    totals: PeriodTotals | None = None
    error: str | None = None


class WorkerStats(BaseModel):
    script_name: str
    requests: int = 0
    errors: int = 0
    subrequests: int = 0
    cpu_time_p50: float = 0.0
    cpu_time_p99: float = 0.0


class WorkersAccountStats(BaseModel):
    account: str
    account_id: str = ""
    workers: list[WorkerStats] = Field(default_factory=list)
    total_requests: int = 0
    total_errors: int = 0
    error: str | None = None


class WorkersReport(BaseModel):
    accounts: list[WorkersAccountStats] = Field(default_factory=list)
    total_requests: int = 0
    total_errors: int = 0
