"""Prometheus metrics for Monte-Log.

Provides metrics collection and exposure:
- HTTP request metrics (latency, count)
- Cache metrics (hits, misses and backend errors per cache entry family)
- Scheduled job runs by outcome

Usage:
    from montelog.observability.metrics import get_metrics

    metrics = get_metrics()
    metrics.http_requests_total.labels(method="GET", path="/posts", status=200).inc()
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from montelog.config import settings

if TYPE_CHECKING:
    from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

_NUMERIC_SEGMENT = re.compile(r"/\d+(?=/|$)")


@dataclass
class MetricsRegistry:
    """Registry for Prometheus metrics."""

    http_requests_total: Any = None
    http_request_duration_seconds: Any = None

    cache_hits_total: Any = None
    cache_misses_total: Any = None
    cache_errors_total: Any = None

    job_runs_total: Any = None

    _initialized: bool = field(default=False, repr=False)
    _registry: Any = field(default=None, repr=False)

    @property
    def enabled(self) -> bool:
        return self._registry is not None

    def initialize(
        self,
        enabled: bool | None = None,
        registry: CollectorRegistry | None = None,
    ) -> None:
        """Initialize Prometheus metrics.

        Args:
            enabled: Whether to register collectors. Defaults to the module
                settings. A registry initialized as disabled can still be
                enabled later; an enabled one stays enabled.
            registry: Collector registry to register with (default REGISTRY)
        """
        if self.enabled:
            return

        if enabled is None:
            if self._initialized:
                return
            enabled = settings.enable_metrics

        if not enabled:
            if not self._initialized:
                logger.info("Metrics are disabled")
            self._initialized = True
            return

        self._registry = registry or REGISTRY

        self.http_requests_total = Counter(
            "montelog_http_requests_total",
            "Total HTTP requests",
            ["method", "path", "status"],
            registry=self._registry,
        )

        self.http_request_duration_seconds = Histogram(
            "montelog_http_request_duration_seconds",
            "HTTP request latency in seconds",
            ["method", "path"],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
            registry=self._registry,
        )

        self.cache_hits_total = Counter(
            "montelog_cache_hits_total",
            "Cache hits",
            ["cache_name", "cache_type"],
            registry=self._registry,
        )

        self.cache_misses_total = Counter(
            "montelog_cache_misses_total",
            "Cache misses",
            ["cache_name", "cache_type"],
            registry=self._registry,
        )

        self.cache_errors_total = Counter(
            "montelog_cache_errors_total",
            "Cache backend failures",
            ["operation", "cache_type"],
            registry=self._registry,
        )

        self.job_runs_total = Counter(
            "montelog_job_runs_total",
            "Scheduled job runs",
            ["job", "outcome"],
            registry=self._registry,
        )

        self._initialized = True
        logger.info("Prometheus metrics initialized")

    def generate_latest(self) -> bytes:
        """Generate Prometheus metrics in exposition format."""
        if not self.enabled:
            return b"# Metrics disabled\n"
        return generate_latest(self._registry)


metrics_registry = MetricsRegistry()


def get_metrics(enabled: bool | None = None) -> MetricsRegistry:
    """Get the global metrics registry.

    Initializes metrics on first access, or when enabled is passed explicitly
    by an application built with its own settings.
    """
    if enabled is not None or not metrics_registry._initialized:
        metrics_registry.initialize(enabled)
    return metrics_registry


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware recording request count and duration."""

    def __init__(self, app: "ASGIApp") -> None:
        super().__init__(app)
        self.metrics = get_metrics()

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        if not self.metrics.enabled or request.url.path.startswith(("/health", "/metrics")):
            return await call_next(request)

        method = request.method
        path = normalize_path(request.url.path)
        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration = time.perf_counter() - start_time
            self.metrics.http_requests_total.labels(
                method=method, path=path, status=status_code
            ).inc()
            self.metrics.http_request_duration_seconds.labels(method=method, path=path).observe(
                duration
            )


def normalize_path(path: str) -> str:
    """Replace numeric path segments to keep label cardinality bounded.

    /posts/42/like-count -> /posts/{id}/like-count
    """
    return _NUMERIC_SEGMENT.sub("/{id}", path)


def record_cache_hit(cache_name: str, cache_type: str = "redis") -> None:
    metrics = get_metrics()
    if metrics.enabled:
        metrics.cache_hits_total.labels(cache_name=cache_name, cache_type=cache_type).inc()


def record_cache_miss(cache_name: str, cache_type: str = "redis") -> None:
    metrics = get_metrics()
    if metrics.enabled:
        metrics.cache_misses_total.labels(cache_name=cache_name, cache_type=cache_type).inc()


def record_cache_error(operation: str, cache_type: str = "redis") -> None:
    """Record a failed cache backend call (get, set, delete, scan)."""
    metrics = get_metrics()
    if metrics.enabled:
        metrics.cache_errors_total.labels(operation=operation, cache_type=cache_type).inc()


def record_job_run(job: str, outcome: str) -> None:
    """Record a scheduled job run with outcome "success" or "failure"."""
    metrics = get_metrics()
    if metrics.enabled:
        metrics.job_runs_total.labels(job=job, outcome=outcome).inc()
