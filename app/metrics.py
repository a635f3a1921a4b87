"""
Metrics Module

Prometheus request metrics for the HTTP surface.

Design Decisions:
- Each application owns its own CollectorRegistry so that several apps
  can live in one process (the test suite builds many)
- Requests are labelled by route template, never by raw path, to keep
  label cardinality bounded
- Requests that match no route share a single "unmatched" path label
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.requests import Request
from starlette.routing import Match

UNMATCHED_PATH = "unmatched"


class RequestMetrics:
    """
    HTTP request counter and latency histogram.

    Usage:
        metrics = RequestMetrics()
        metrics.observe("GET", "/team/get", 200, 0.004)
        body = metrics.render()
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: CollectorRegistry = None):
        self.registry = registry or CollectorRegistry()
        self.requests_total = Counter(
            "review_service_http_requests_total",
            "Total HTTP requests",
            ["method", "path", "status"],
            registry=self.registry,
        )
        self.request_duration = Histogram(
            "review_service_http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "path"],
            registry=self.registry,
        )

    def observe(self, method: str, path: str, status_code: int, duration: float) -> None:
        self.requests_total.labels(method, path, str(status_code)).inc()
        self.request_duration.labels(method, path).observe(duration)

    def render(self) -> bytes:
        """Current samples in the Prometheus text exposition format."""
        return generate_latest(self.registry)


def route_template(request: Request) -> str:
    """Path template of the route serving the request, e.g. ``/team/get``."""
    partial = None
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return route.path
        if match == Match.PARTIAL and partial is None:
            partial = route.path
    return partial or UNMATCHED_PATH
