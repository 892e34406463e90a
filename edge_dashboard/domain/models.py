from pydantic import BaseModel, ConfigDict, Field

from edge_shared.constants import Provider


class AccountConfig(BaseModel):
    """Credentials for one vendor account plus its optional scope filter.

    ``scope`` holds trimmed, lower-cased domain / zone / site identifiers.
    An empty scope means every zone of the account is visible.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    key_id: str = Field(..., repr=False)
    secret: str = Field(..., repr=False)
    scope: tuple[str, ...] = ()
    account_id: str | None = None

    @property
    def is_scoped(self) -> bool:
        return bool(self.scope)

    def matches(self, *identifiers: str | None) -> bool:
        """Case-insensitive scope test against any of ``identifiers``."""
        if not self.scope:
            return True
        return any(
            ident is not None and ident.strip().lower() in self.scope
            for ident in identifiers
        )


class CredentialRegistry(BaseModel):
    """All configured accounts, resolved once at startup."""

    model_config = ConfigDict(frozen=True)

    cloudflare: tuple[AccountConfig, ...] = ()
    edgeone: tuple[AccountConfig, ...] = ()
    esa: tuple[AccountConfig, ...] = ()

    def counts(self) -> dict[str, int]:
        return {p.value: len(self.accounts(p)) for p in Provider.all()}

    def accounts(self, provider: Provider) -> tuple[AccountConfig, ...]:
        return getattr(self, provider.value)


class MetricPoint(BaseModel):
    """One rollup bucket in the unified time-series shape."""

    timestamp: str
    requests: int = 0
    bytes: int = 0
    threats: int = 0
    cached_requests: int = 0
    cached_bytes: int = 0


class SeriesPoint(BaseModel):
    time: str
    value: int | float = 0


class TopNEntry(BaseModel):
    key: str
    value: int | float = 0


class PeriodTotals(BaseModel):
    """Sums over the window selected for a dashboard period."""

    period: str
    granularity: str
    points: int = 0
    requests: int = 0
    bytes: int = 0
    threats: int = 0
    cached_requests: int = 0
    cached_bytes: int = 0
    cache_hit_rate: float = 0.0
