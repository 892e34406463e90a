from __future__ import annotations

import asyncio
from typing import Any

import httpx

from edge_shared.constants import Provider

from ...core.config import Settings, settings
from ...core.logger import get_logger
from ...domain.cloudflare import CloudflareZone
from ...domain.models import AccountConfig
from ...normalization import cloudflare as normalize
from ...normalization.fields import pick, pick_int, pick_list, pick_str
from ..http import ProviderAPIError, request_json

logger = get_logger("edge_dashboard.cloudflare.client")


class CloudflareClient:
    """REST + GraphQL access for one Cloudflare account."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        account: AccountConfig,
        config: Settings = settings,
    ):
        self.http = http
        self.account = account
        self.config = config
        self.base_url = config.cloudflare_api_base.rstrip("/")

    @property
    def headers(self) -> dict[str, str]:
        return {
            "X-Auth-Key": self.account.key_id,
            "X-Auth-Email": self.account.secret,
            "Content-Type": "application/json",
        }

    async def _get(self, action: str, path: str, params: dict[str, Any]) -> Any:
        return await request_json(
            self.http,
            Provider.CLOUDFLARE,
            action,
            "GET",
            f"{self.base_url}{path}",
            config=self.config,
            params=params,
            headers=self.headers,
        )

    async def list_zones(self) -> list[CloudflareZone]:
        """Every zone of the account, following ``result_info.total_pages``.

        A page answered with ``success: false`` ends pagination and keeps the
        zones gathered so far.
        """
        zones: list[CloudflareZone] = []
        page = 1
        while True:
            body = await self._get(
                "zones",
                "/zones",
                {"page": page, "per_page": self.config.cloudflare_zone_page_size},
            )
            if not pick(body, "success", default=False) or not isinstance(
                pick(body, "result"), list
            ):
                logger.error(
                    "cloudflare_zone_listing_unsuccessful",
                    extra={"account": self.account.name, "page": page},
                )
                break

            zones.extend(normalize.zone(raw) for raw in pick_list(body, "result"))

            if page >= pick_int(body, "result_info.total_pages"):
                break
            page += 1
        return zones

    async def graphql(
        self,
        query: str,
        variables: dict[str, Any],
        action: str = "graphql",
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """POST a GraphQL document, cancelled after ``timeout`` seconds."""
        timeout = self.config.cloudflare_graphql_timeout_seconds if timeout is None else timeout
        call = request_json(
            self.http,
            Provider.CLOUDFLARE,
            action,
            "POST",
            f"{self.base_url}/graphql",
            config=self.config,
            json={"query": query, "variables": variables},
            headers=self.headers,
        )
        try:
            body = await asyncio.wait_for(call, timeout)
        except asyncio.TimeoutError as e:
            raise ProviderAPIError(
                Provider.CLOUDFLARE, action, f"timed out after {timeout:g}s"
            ) from e

        if not isinstance(body, dict):
            raise ProviderAPIError(Provider.CLOUDFLARE, action, "unexpected GraphQL payload")
        if body.get("errors") and not body.get("data"):
            raise ProviderAPIError(
                Provider.CLOUDFLARE,
                action,
                pick_str(body, "errors.0.message", default="GraphQL error"),
            )
        return body

    async def resolve_account_id(self) -> str | None:
        """Configured account id, else the first account visible to the key."""
        if self.account.account_id:
            return self.account.account_id
        body = await self._get("accounts", "/accounts", {"page": 1, "per_page": 1})
        return pick_str(body, "result.0.id") or None
