from edge_shared.metrics import get_counter, get_histogram

_SERVICE = "edge_dashboard"

# Outbound vendor calls
UPSTREAM_REQUESTS_TOTAL = get_counter(
    "upstream_requests_total",
    "Vendor API calls attempted, by provider.",
    service=_SERVICE,
    labelnames=("provider",),
)
UPSTREAM_FAILURES_TOTAL = get_counter(
    "upstream_failures_total",
    "Vendor API calls that ended in a ProviderAPIError, by provider.",
    service=_SERVICE,
    labelnames=("provider",),
)
UPSTREAM_LATENCY_SECONDS = get_histogram(
    "upstream_latency_seconds",
    "Latency of vendor API calls.",
    service=_SERVICE,
    labelnames=("provider",),
)

# Inbound API
API_REQUESTS_TOTAL = get_counter(
    "api_requests_total",
    "Dashboard API requests, by endpoint.",
    service=_SERVICE,
    labelnames=("endpoint",),
)
