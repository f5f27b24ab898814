"""Prometheus instruments for the HTTP surface."""

import time

from fastapi import Request
from prometheus_client import Counter, Histogram

UNMATCHED_PATH = "unmatched"

REQUEST_COUNT = Counter(
    "http_requests_total",
    "HTTP requests handled",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "path"],
)


def _route_path(request: Request) -> str:
    # Route template so /symbols/1 and /symbols/2 share a label; unrouted requests share one
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_PATH)


async def prometheus_middleware(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    path = _route_path(request)
    REQUEST_LATENCY.labels(request.method, path).observe(time.perf_counter() - start)
    REQUEST_COUNT.labels(request.method, path, str(response.status_code)).inc()
    return response
