"""
Prometheus metrics for HTTP traffic and the PIX payment flow
"""

from prometheus_client import Counter, Histogram, REGISTRY


def _counter(name: str, documentation: str, labels: list) -> Counter:
    # Re-importing the module (reloads in tests) must not register twice
    try:
        return Counter(name, documentation, labels)
    except ValueError:
        return REGISTRY._names_to_collectors[name]


def _histogram(name: str, documentation: str, labels: list) -> Histogram:
    try:
        return Histogram(name, documentation, labels)
    except ValueError:
        return REGISTRY._names_to_collectors[name]


REQUEST_COUNT = _counter(
    "app_requests_total",
    "Total requests",
    ["method", "endpoint", "status"]
)
REQUEST_DURATION = _histogram(
    "app_request_duration_seconds",
    "Request duration",
    ["method", "endpoint"]
)

# outcome: created | rejected | timeout | unreachable
PIX_TRANSACTIONS = _counter(
    "pix_transactions_total",
    "PIX transaction creation attempts against the gateway",
    ["outcome"]
)

# classification: paid | not_paid
PAYMENT_POSTBACKS = _counter(
    "payment_postbacks_total",
    "Gateway postback notifications received",
    ["classification"]
)

GATEWAY_LATENCY = _histogram(
    "payment_gateway_request_seconds",
    "Latency of create-transaction calls to the payment gateway",
    ["provider"]
)
