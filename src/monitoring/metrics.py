from prometheus_client import Counter, Histogram

REQUESTS = Counter("rm_api_requests_total", "Total API requests", ["endpoint", "method", "status"])
LATENCY = Histogram("rm_api_latency_seconds", "API latency seconds", ["endpoint"])

# speech / generative / pdf calls, outcome = ok | error
VENDOR_CALLS = Counter("rm_vendor_calls_total", "Calls to external services", ["service", "outcome"])
