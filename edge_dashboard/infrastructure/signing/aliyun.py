"""HMAC-SHA1 RPC signing for Aliyun OpenAPI (signature version 1.0)."""

from __future__ import annotations

import base64
import hashlib
import hmac
import uuid
from datetime import datetime, timezone
from typing import Any, Mapping
from urllib.parse import quote

SIGNATURE_METHOD = "HMAC-SHA1"
SIGNATURE_VERSION = "1.0"


def percent_encode(value: Any) -> str:
    """RFC3986 encoding with the substitutions the RPC gateway expects."""
    encoded = quote(str(value), safe="")
    return encoded.replace("+", "%20").replace("*", "%2A").replace("%7E", "~")


def flatten_params(params: Mapping[str, Any]) -> dict[str, str]:
    """Flatten list values to ``Key.1``, ``Key.2``... and nested mappings to
    ``Key.1.Sub``. ``None`` values are dropped."""
    flat: dict[str, str] = {}

    def _put(prefix: str, value: Any) -> None:
        if value is None:
            return
        if isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                _put(f"{prefix}.{sub_key}", sub_value)
        elif isinstance(value, (list, tuple)):
            for index, item in enumerate(value, start=1):
                _put(f"{prefix}.{index}", item)
        elif isinstance(value, bool):
            flat[prefix] = "true" if value else "false"
        else:
            flat[prefix] = str(value)

    for key, value in params.items():
        _put(key, value)
    return flat


def canonicalize(params: Mapping[str, str]) -> str:
    return "&".join(
        f"{percent_encode(k)}={percent_encode(params[k])}" for k in sorted(params)
    )


def string_to_sign(params: Mapping[str, str], method: str = "GET") -> str:
    return f"{method.upper()}&{percent_encode('/')}&{percent_encode(canonicalize(params))}"


def sign_params(params: Mapping[str, str], secret: str, method: str = "GET") -> str:
    digest = hmac.new(
        f"{secret}&".encode("utf-8"),
        string_to_sign(params, method).encode("utf-8"),
        hashlib.sha1,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def iso_timestamp(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class AliyunRpcSigner:
    def __init__(self, access_key_id: str, access_key_secret: str, version: str):
        self.access_key_id = access_key_id
        self._secret = access_key_secret
        self.version = version

    def signed_params(
        self,
        action: str,
        params: Mapping[str, Any] | None = None,
        method: str = "GET",
        timestamp: str | None = None,
        nonce: str | None = None,
    ) -> dict[str, str]:
        """Common parameters + flattened ``params`` + ``Signature``.

        Each call gets a fresh nonce and timestamp unless pinned by the caller.
        """
        signed = {
            "Format": "JSON",
            "Version": self.version,
            "AccessKeyId": self.access_key_id,
            "SignatureMethod": SIGNATURE_METHOD,
            "SignatureVersion": SIGNATURE_VERSION,
            "SignatureNonce": nonce or str(uuid.uuid4()),
            "Timestamp": timestamp or iso_timestamp(),
            "Action": action,
        }
        signed.update(flatten_params(params or {}))
        signed["Signature"] = sign_params(signed, self._secret, method)
        return signed

    @staticmethod
    def query_string(params: Mapping[str, str]) -> str:
        return "&".join(f"{percent_encode(k)}={percent_encode(v)}" for k, v in params.items())
