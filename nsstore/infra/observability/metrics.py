from prometheus_client import Counter, Histogram, make_asgi_app

# Low-cardinality labels: route templates (e.g. /api/v1/storage/{bucket}), never raw paths
REQUESTS = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "route", "status"],
)

LATENCY = Histogram(
    "http_request_duration_seconds",
    "Request latency in seconds",
    ["method", "route"],
)

STORAGE_OPERATIONS = Counter(
    "nsstore_storage_operations_total",
    "Adapter operations by outcome",
    ["operation", "outcome"],
)

CREDENTIAL_FAILURES = Counter(
    "nsstore_credential_failures_total",
    "Storage failures caused by invalid or expired credentials",
)

metrics_app = make_asgi_app()
