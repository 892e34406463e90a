"""Outbound HTTP plumbing shared by the vendor clients.

Every transport, status or decoding problem surfaces as ``ProviderAPIError``
so callers can degrade a single zone / site / account without catching
library specific exceptions.
"""

from __future__ import annotations

import time
from typing import Any, Callable

import httpx

from edge_shared.constants import Provider
from edge_shared.utils.retry import retry_async

from ..core.config import Settings, settings
from ..core.logger import get_logger
from ..normalization.fields import pick_str
from .metrics import (
    UPSTREAM_FAILURES_TOTAL,
    UPSTREAM_LATENCY_SECONDS,
    UPSTREAM_REQUESTS_TOTAL,
)

logger = get_logger("edge_dashboard.http")


class ProviderAPIError(Exception):
    def __init__(
        self,
        provider: Provider,
        action: str,
        message: str,
        status: int | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.action = action
        self.message = message
        self.status = status

    def __str__(self) -> str:
        return f"{self.provider.value} {self.action} failed: {self.message}"


def build_http_client(config: Settings = settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        limits=httpx.Limits(max_connections=config.http_max_connections),
        headers={"User-Agent": f"{config.otel_service_name}/0.1"},
    )


def _error_message(body: Any) -> str:
    """Vendor error text from Cloudflare, Tencent or Aliyun error bodies."""
    return pick_str(
        body,
        "errors.0.message",
        "Response.Error.Message",
        "Message",
        "message",
    )


async def _request_once(
    client: httpx.AsyncClient,
    provider: Provider,
    action: str,
    method: str,
    url: str,
    **kwargs: Any,
) -> Any:
    UPSTREAM_REQUESTS_TOTAL.labels(provider.value).inc()
    started = time.perf_counter()
    try:
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ProviderAPIError(provider, action, f"{type(e).__name__}: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise ProviderAPIError(
                provider,
                action,
                f"invalid JSON in HTTP {response.status_code} response",
                response.status_code,
            ) from e

        if response.is_error:
            message = _error_message(body) or f"HTTP {response.status_code}"
            raise ProviderAPIError(provider, action, message, response.status_code)
        return body
    except ProviderAPIError:
        UPSTREAM_FAILURES_TOTAL.labels(provider.value).inc()
        raise
    finally:
        UPSTREAM_LATENCY_SECONDS.labels(provider.value).observe(
            time.perf_counter() - started
        )


async def request_json(
    client: httpx.AsyncClient,
    provider: Provider,
    action: str,
    method: str,
    url: str,
    config: Settings = settings,
    prepare: Callable[[], dict[str, Any]] | None = None,
    **kwargs: Any,
) -> Any:
    """Issue one vendor call under the configured retry policy.

    With ``upstream_retries=0`` this is a single attempt. ``prepare`` is called
    before every attempt and its result overrides ``url`` and ``kwargs``, so
    signed requests get a new signature each time.
    """

    async def _attempt():
        request_url, request_kwargs = url, kwargs
        if prepare is not None:
            fresh = prepare()
            request_url = fresh.pop("url", url)
            request_kwargs = {**kwargs, **fresh}
        return await _request_once(
            client, provider, action, method, request_url, **request_kwargs
        )

    def _on_retry(attempt: int, exc: BaseException, sleep_for: float):
        logger.warning(
            "upstream_call_retry",
            extra={
                "provider": provider.value,
                "action": action,
                "attempt": attempt,
                "error": str(exc),
                "sleep_for": round(sleep_for, 2),
            },
        )

    return await retry_async(
        _attempt,
        retries=config.upstream_retries + 1,
        base_delay=config.upstream_retry_base_delay,
        max_delay=config.upstream_retry_max_delay,
        jitter=0.2,
        retry_on=(ProviderAPIError,),
        on_retry=_on_retry,
    )
