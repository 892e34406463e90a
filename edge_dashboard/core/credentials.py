"""Account discovery from a flat key/value namespace.

Each provider reads an unindexed variable set (``CF_API_KEY`` + ``CF_EMAIL``)
followed by indexed sets (``CF_API_KEY_1``, ``CF_API_KEY_2``, ...). Indexed
probing stops at the first suffix whose required pair is incomplete. The
result is built once at startup and handed to the request handlers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from edge_shared.constants import Provider

from ..domain.models import AccountConfig, CredentialRegistry


@dataclass(frozen=True)
class CredentialLayout:
    """Variable names one provider uses for its accounts."""

    key_var: str
    secret_var: str
    scope_var: str
    name_var: str
    default_name: str
    account_id_var: str | None = None


LAYOUTS: dict[Provider, CredentialLayout] = {
    Provider.CLOUDFLARE: CredentialLayout(
        key_var="CF_API_KEY",
        secret_var="CF_EMAIL",
        scope_var="CF_DOMAINS",
        name_var="CF_ACCOUNT_NAME",
        default_name="Cloudflare",
        account_id_var="CF_ACCOUNT_ID",
    ),
    Provider.EDGEONE: CredentialLayout(
        key_var="SECRET_ID",
        secret_var="SECRET_KEY",
        scope_var="EO_ZONES",
        name_var="EO_ACCOUNT_NAME",
        default_name="EdgeOne",
    ),
    Provider.ESA: CredentialLayout(
        key_var="ESA_ACCESS_KEY_ID",
        secret_var="ESA_ACCESS_KEY_SECRET",
        scope_var="ESA_SITES",
        name_var="ESA_ACCOUNT_NAME",
        default_name="Aliyun ESA",
    ),
}


def parse_scope(raw: str | None) -> tuple[str, ...]:
    """Split a comma separated scope list into trimmed lower-case entries."""
    if not raw:
        return ()
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


def _value(env: Mapping[str, str], name: str) -> str:
    return (env.get(name) or "").strip()


def _account(
    env: Mapping[str, str],
    layout: CredentialLayout,
    suffix: str,
    fallback_name: str,
) -> AccountConfig | None:
    key_id = _value(env, layout.key_var + suffix)
    secret = _value(env, layout.secret_var + suffix)
    if not (key_id and secret):
        return None
    account_id = None
    if layout.account_id_var:
        account_id = _value(env, layout.account_id_var + suffix) or None
    return AccountConfig(
        name=_value(env, layout.name_var + suffix) or fallback_name,
        key_id=key_id,
        secret=secret,
        scope=parse_scope(env.get(layout.scope_var + suffix)),
        account_id=account_id,
    )


def resolve_accounts(
    env: Mapping[str, str], layout: CredentialLayout
) -> list[AccountConfig]:
    """Resolve the ordered account list for one provider.

    The unindexed set comes first when present; indexed sets follow in
    suffix order. A missing configuration yields an empty list.
    """
    accounts: list[AccountConfig] = []

    single = _account(env, layout, "", layout.default_name)
    if single is not None:
        accounts.append(single)

    index = 1
    while True:
        indexed = _account(
            env, layout, f"_{index}", f"{layout.default_name} {index}"
        )
        if indexed is None:
            break
        accounts.append(indexed)
        index += 1

    return accounts


def load_credentials(env: Mapping[str, str] | None = None) -> CredentialRegistry:
    env = os.environ if env is None else env
    return CredentialRegistry(
        cloudflare=tuple(resolve_accounts(env, LAYOUTS[Provider.CLOUDFLARE])),
        edgeone=tuple(resolve_accounts(env, LAYOUTS[Provider.EDGEONE])),
        esa=tuple(resolve_accounts(env, LAYOUTS[Provider.ESA])),
    )
