"""Aliyun ESA payloads to the unified schema.

ESA answers in PascalCase through the RPC gateway but in camelCase through
its SDKs, and some list actions wrap arrays one level deeper. Every field is
therefore looked up through an ordered candidate list.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any

from ..domain.esa import EsaQuota, EsaRoutine, EsaSite
from ..domain.models import SeriesPoint
from .fields import pick, pick_dict, pick_int, pick_list, pick_number, pick_str

SITE_FIELDS: dict[str, tuple[str, ...]] = {
    "site_id": ("SiteId", "siteId", "Id"),
    "site_name": ("SiteName", "siteName", "Name"),
    "status": ("Status", "status"),
    "type": ("Type", "type"),
    "coverage": ("Coverage", "coverage"),
    "cname_status": ("CnameStatus", "cnameStatus"),
    "area": ("Area", "area"),
    "access_type": ("AccessType", "accessType"),
    "plan_type": ("PlanType", "planType", "RatePlanType", "ratePlanType"),
    "instance_id": ("InstanceId", "instanceId"),
    "create_time": ("CreateTime", "createTime", "GmtCreate", "gmtCreate"),
    "update_time": ("UpdateTime", "updateTime", "GmtModified", "gmtModified"),
    "verify_status": ("VerifyStatus", "verifyStatus"),
    "resource_group_id": ("ResourceGroupId", "resourceGroupId"),
    "description": ("Description", "description"),
}
NAME_SERVER_FIELDS = ("NameServerList", "nameServerList", "NameServers", "nameServers")

SITES_PATHS = (
    "Sites",
    "sites",
    "Result.Sites",
    "Result.sites",
    "Data.Sites",
    "Sites.Site",
    "Result.Sites.Site",
    "Data.Sites.Site",
)
ROUTINES_PATHS = ("Routines", "Result.Routines", "Data.Routines", "Routines.Routine")
INSTANCES_PATHS = ("Instances", "Result.Instances", "Data.Instances", "Instances.Instances")
PLANS_PATHS = ("Plans", "Result.Plans", "Data.Plans")


def site(raw: Any) -> EsaSite:
    fields = {name: pick_str(raw, *paths) for name, paths in SITE_FIELDS.items()}
    name_servers = pick(raw, *NAME_SERVER_FIELDS)
    if isinstance(name_servers, list):
        name_servers = ",".join(str(ns) for ns in name_servers)
    return EsaSite(
        domain_count=pick_int(raw, "DomainCount", "domainCount"),
        name_server_list="" if name_servers is None else str(name_servers),
        **fields,
    )


def raw_sites(response: Any) -> list:
    return pick_list(response, *SITES_PATHS)


def quota(raw: Any) -> EsaQuota:
    return EsaQuota(
        quota_name=pick_str(raw, "QuotaName", "quotaName", "Name"),
        total=pick_number(raw, "Total", "total", "Quota", "quota", "QuotaValue"),
        used=pick_number(raw, "Used", "used", "Usage", "usage"),
    )


def quotas(response: Any) -> list[EsaQuota]:
    return [quota(q) for q in pick_list(response, "Quotas", "Result.Quotas", "Data.Quotas")]


def routine(raw: Any) -> EsaRoutine:
    return EsaRoutine(
        name=pick_str(raw, "Name", "name", "RoutineName"),
        description=pick_str(raw, "Description", "description"),
        code_version=pick_str(raw, "CodeVersion", "codeVersion"),
        status=pick_str(raw, "Status", "status"),
        create_time=pick_str(raw, "CreateTime", "createTime"),
        update_time=pick_str(raw, "UpdateTime", "updateTime"),
        env=pick_str(raw, "Env", "env"),
        related_record=pick_str(raw, "DefaultRelatedRecord", "relatedRecord"),
    )


def routines(response: Any) -> tuple[list[EsaRoutine], int]:
    """Normalized routines and the vendor's total count (falls back to length)."""
    items = [routine(r) for r in pick_list(response, *ROUTINES_PATHS)]
    total = pick_int(response, "TotalCount", "Result.TotalCount") or len(items)
    return items, total


def decode_description(value: str) -> str:
    """Routine descriptions are stored base64 encoded; plain text is kept."""
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return value


def merge_routine_detail(base: EsaRoutine, detail: Any) -> EsaRoutine:
    """Overlay ``GetRoutine`` details (production env, latest code version)."""
    envs = [e for e in pick_list(detail, "Envs", "envs") if isinstance(e, dict)]
    production = next(
        (e for e in envs if pick_str(e, "Env", "env") == "production"),
        envs[0] if envs else {},
    )
    latest_version = pick_str(production, "CodeDeploy.CodeVersions.0.CodeVersion")
    description = pick_str(detail, "Description")
    deployed = bool(envs) and bool(pick_dict(production, "CodeDeploy"))
    return base.model_copy(
        update={
            "description": decode_description(description) if description else base.description,
            "create_time": pick_str(detail, "CreateTime") or base.create_time,
            "related_record": pick_str(detail, "DefaultRelatedRecord") or base.related_record,
            "env": pick_str(production, "Env", "env"),
            "code_version": latest_version or base.code_version,
            "status": "deployed" if deployed else base.status,
        }
    )


def instance_id(*records: Any) -> str:
    """First instance id carried by any of ``records``."""
    for record in records:
        value = pick_str(record, "InstanceId", "instanceId")
        if value:
            return value
    return ""


def first_instance_id(response: Any) -> str:
    instances = pick_list(response, *INSTANCES_PATHS)
    return instance_id(instances[0]) if instances else ""


def plans(response: Any) -> list[dict]:
    return [p for p in pick_list(response, *PLANS_PATHS) if isinstance(p, dict)]


def er_service(response: Any) -> dict:
    return {k: v for k, v in (response or {}).items() if k != "RequestId"}


def time_series(response: Any) -> dict[str, Any]:
    """Totals and per-field series from ``DescribeSiteTimeSeriesData``.

    Returns ``requests``, ``bytes``, ``requests_series`` and ``traffic_series``.
    """
    totals = {"Requests": 0, "Traffic": 0}
    for item in pick_list(response, "SummarizedData", "summarizedData"):
        field = pick_str(item, "FieldName", "fieldName")
        if field in totals:
            totals[field] += pick_number(item, "Value", "value")

    series: dict[str, list[SeriesPoint]] = {"Requests": [], "Traffic": []}
    for item in pick_list(response, "Data", "data"):
        field = pick_str(item, "FieldName", "fieldName")
        if field not in series:
            continue
        for point in pick_list(item, "DetailData", "detailData"):
            series[field].append(
                SeriesPoint(
                    time=pick_str(point, "TimeStamp", "timeStamp"),
                    value=pick_number(point, "Value", "value"),
                )
            )

    return {
        "requests": int(totals["Requests"]),
        "bytes": int(totals["Traffic"]),
        "requests_series": series["Requests"],
        "traffic_series": series["Traffic"],
    }
