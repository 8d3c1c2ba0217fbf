from __future__ import annotations

import re
from prometheus_client import Counter, Histogram


def normalize_path(path: str) -> str:
    """Reduce high-cardinality paths for metrics labels."""
    p = path or "/"

    # UUID-ish
    p = re.sub(r"/[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}", "/:uuid", p)
    # ints
    p = re.sub(r"/\d+", "/:id", p)
    # anything not served by this app collapses to one label
    if not (p.startswith("/api/") or p.startswith("/health") or p == "/metrics"):
        p = "/:other"
    return p


HTTP_REQUESTS_TOTAL = Counter(
    "labledger_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "labledger_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
