from typing import Any

from pydantic import BaseModel, Field

from .models import SeriesPoint


class EsaSite(BaseModel):
    site_id: str = ""
    site_name: str = ""
    status: str = ""
    domain_count: int = 0
    type: str = ""
    coverage: str = ""
    cname_status: str = ""
    area: str = ""
    access_type: str = ""
    plan_type: str = ""
    instance_id: str = ""
    create_time: str = ""
    update_time: str = ""
    verify_status: str = ""
    name_server_list: str = ""
    resource_group_id: str = ""
    description: str = ""

    requests: int = 0
    bytes: int = 0
    time_series_requests: list[SeriesPoint] = Field(default_factory=list)
    time_series_traffic: list[SeriesPoint] = Field(default_factory=list)
    error: str | None = None


class EsaQuota(BaseModel):
    quota_name: str = ""
    total: int | float = 0
    used: int | float = 0


class EsaRoutine(BaseModel):
    name: str = ""
    description: str = ""
    code_version: str = ""
    status: str = ""
    create_time: str = ""
    update_time: str = ""
    env: str = ""
    related_record: str = ""


class EsaAccount(BaseModel):
    name: str
    sites: list[EsaSite] = Field(default_factory=list)
    quotas: list[EsaQuota] = Field(default_factory=list)
    total_requests: int = 0
    total_bytes: int = 0
    instance_id: str = ""
    quota_source: str = "fallback"
    routines: list[EsaRoutine] = Field(default_factory=list)
    routine_count: int = 0
    edge_routine_plans: list[dict[str, Any]] = Field(default_factory=list)
    er_service: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None
    warnings: list[str] = Field(default_factory=list)


class EsaReport(BaseModel):
    accounts: list[EsaAccount] = Field(default_factory=list)
