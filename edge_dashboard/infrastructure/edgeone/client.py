from __future__ import annotations

import json
import time
from typing import Any, Callable

import httpx

from edge_shared.constants import Provider

from ...core.config import Settings, settings
from ...domain.models import AccountConfig
from ...normalization.fields import pick_dict, pick_str
from ..http import ProviderAPIError, request_json
from ..signing.tencent import CONTENT_TYPE, TC3Signer


class EdgeOneClient:
    """Signed JSON calls to the Tencent EdgeOne (``teo``) API."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        account: AccountConfig,
        config: Settings = settings,
        clock: Callable[[], float] = time.time,
    ):
        self.http = http
        self.account = account
        self.config = config
        self._clock = clock
        self.signer = TC3Signer(account.key_id, account.secret, host=config.edgeone_host)

    def headers(self, action: str, body: str) -> dict[str, str]:
        signed = self.signer.sign(action, body, int(self._clock()))
        return {
            "Content-Type": CONTENT_TYPE,
            "Host": self.config.edgeone_host,
            "X-TC-Action": action,
            "X-TC-Version": self.config.edgeone_version,
            "X-TC-Region": self.config.edgeone_region,
            "X-TC-Timestamp": str(signed.timestamp),
            "Authorization": signed.authorization,
        }

    async def call(self, action: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Return the ``Response`` object of ``action``.

        The body is serialised once so the bytes sent are the bytes signed.
        """
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        data = await request_json(
            self.http,
            Provider.EDGEONE,
            action,
            "POST",
            f"https://{self.config.edgeone_host}",
            config=self.config,
            content=body.encode("utf-8"),
            prepare=lambda: {"headers": self.headers(action, body)},
        )
        response = pick_dict(data, "Response")
        error = pick_dict(response, "Error")
        if error:
            code = pick_str(error, "Code", default="Error")
            raise ProviderAPIError(
                Provider.EDGEONE, action, f"{code}: {pick_str(error, 'Message')}"
            )
        return response
