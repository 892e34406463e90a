"""TC3-HMAC-SHA256 request signing for Tencent Cloud APIs.

Only POST to ``/`` with an empty query string is covered. ``content-type`` and
``host`` are always signed; ``x-tc-action`` is signed unless ``sign_action`` is off.
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime, timezone

ALGORITHM = "TC3-HMAC-SHA256"
CONTENT_TYPE = "application/json; charset=utf-8"
SIGNED_HEADERS = "content-type;host;x-tc-action"
TERMINATOR = "tc3_request"


def sha256_hex(message: str) -> str:
    return hashlib.sha256(message.encode("utf-8")).hexdigest()


def hmac_sha256(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def utc_date(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")


@dataclass(frozen=True)
class SignedRequest:
    action: str
    timestamp: int
    authorization: str


class TC3Signer:
    def __init__(
        self,
        secret_id: str,
        secret_key: str,
        host: str = "teo.tencentcloudapi.com",
        service: str = "teo",
        sign_action: bool = True,
    ):
        self.secret_id = secret_id
        self._secret_key = secret_key
        self.host = host
        self.service = service
        self.sign_action = sign_action
        self.signed_headers = SIGNED_HEADERS if sign_action else "content-type;host"

    def credential_scope(self, date: str) -> str:
        return f"{date}/{self.service}/{TERMINATOR}"

    def canonical_request(self, action: str, body: str) -> str:
        canonical_headers = f"content-type:{CONTENT_TYPE}\nhost:{self.host}\n"
        if self.sign_action:
            canonical_headers += f"x-tc-action:{action.lower()}\n"
        return "\n".join(
            [
                "POST",
                "/",
                "",
                canonical_headers,
                self.signed_headers,
                sha256_hex(body),
            ]
        )

    def string_to_sign(self, canonical_request: str, timestamp: int) -> str:
        return "\n".join(
            [
                ALGORITHM,
                str(timestamp),
                self.credential_scope(utc_date(timestamp)),
                sha256_hex(canonical_request),
            ]
        )

    def signature(self, string_to_sign: str, date: str) -> str:
        secret_date = hmac_sha256(f"TC3{self._secret_key}".encode("utf-8"), date)
        secret_service = hmac_sha256(secret_date, self.service)
        secret_signing = hmac_sha256(secret_service, TERMINATOR)
        return hmac.new(
            secret_signing, string_to_sign.encode("utf-8"), hashlib.sha256
        ).hexdigest()

    def sign(self, action: str, body: str, timestamp: int) -> SignedRequest:
        date = utc_date(timestamp)
        to_sign = self.string_to_sign(self.canonical_request(action, body), timestamp)
        authorization = (
            f"{ALGORITHM} Credential={self.secret_id}/{self.credential_scope(date)}, "
            f"SignedHeaders={self.signed_headers}, "
            f"Signature={self.signature(to_sign, date)}"
        )
        return SignedRequest(action=action, timestamp=timestamp, authorization=authorization)
