from __future__ import annotations

from typing import Any

import httpx

from edge_shared.constants import Provider

from ...core.config import Settings, settings
from ...domain.models import AccountConfig
from ..http import request_json
from ..signing.aliyun import AliyunRpcSigner


class EsaClient:
    """Signed RPC calls to Aliyun ESA.

    POST calls still carry every signed parameter on the query string; only
    the signature's method component changes.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        account: AccountConfig,
        config: Settings = settings,
    ):
        self.http = http
        self.account = account
        self.config = config
        self.signer = AliyunRpcSigner(account.key_id, account.secret, config.esa_version)

    def url(self, action: str, params: dict[str, Any] | None, method: str) -> str:
        signed = self.signer.signed_params(action, params, method=method)
        return f"https://{self.config.esa_endpoint}/?{self.signer.query_string(signed)}"

    async def call(
        self,
        action: str,
        params: dict[str, Any] | None = None,
        method: str = "GET",
    ) -> dict[str, Any]:
        data = await request_json(
            self.http,
            Provider.ESA,
            action,
            method,
            f"https://{self.config.esa_endpoint}/",
            config=self.config,
            prepare=lambda: {"url": self.url(action, params, method)},
        )
        return data if isinstance(data, dict) else {}
