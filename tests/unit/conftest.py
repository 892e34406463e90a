import json

import httpx
import pytest

from edge_dashboard.core.config import settings
from edge_dashboard.core.credentials import parse_scope
from edge_dashboard.domain.models import AccountConfig


@pytest.fixture
def make_account():
    """Factory for AccountConfig with throwaway credentials."""

    def _make(name="Test", scope="", account_id=None, key_id="kid", secret="sec"):
        return AccountConfig(
            name=name,
            key_id=key_id,
            secret=secret,
            scope=parse_scope(scope),
            account_id=account_id,
        )

    return _make


@pytest.fixture
def test_settings():
    """Settings with a short GraphQL timeout and no retry backoff."""
    return settings.model_copy(
        update={
            "cloudflare_graphql_timeout_seconds": 0.5,
            "upstream_retry_base_delay": 0.0,
        }
    )


@pytest.fixture
def json_response():
    def _respond(payload, status_code=200):
        return httpx.Response(
            status_code,
            content=json.dumps(payload).encode(),
            headers={"Content-Type": "application/json"},
        )

    return _respond
