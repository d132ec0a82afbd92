"""
Shared metrics configuration for the leaderboard service.
"""

from prometheus_client import CollectorRegistry, Counter, Histogram, Info, generate_latest
from typing import Dict, Any, Optional


class MetricsCollector:
    """Centralized metrics collector for services."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        # Each collector owns its registry so several services can live in one process
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        # Service info
        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        # Health check metrics
        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        # Error metrics
        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type", "service"],
            registry=self.registry
        )

        self._setup_leaderboard_metrics()

    def _setup_leaderboard_metrics(self):
        """Set up cache, origin and refresh metrics."""
        self._metrics["cache_lookups_total"] = Counter(
            "cache_lookups_total",
            "Total cache lookups",
            ["entity", "result"],
            registry=self.registry
        )

        self._metrics["origin_requests_total"] = Counter(
            "origin_requests_total",
            "Total origin API requests",
            ["operation", "status"],
            registry=self.registry
        )

        self._metrics["refresh_runs_total"] = Counter(
            "refresh_runs_total",
            "Total background refresh runs",
            ["loop", "outcome"],
            registry=self.registry
        )

        self._metrics["refresh_duration_seconds"] = Histogram(
            "refresh_duration_seconds",
            "Background refresh duration in seconds",
            ["loop"],
            registry=self.registry
        )

    def export(self) -> bytes:
        """Render the registry in Prometheus text format."""
        return generate_latest(self.registry)

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_error(self, error_type: str, service: Optional[str] = None):
        """Record error metrics."""
        service_name = service or self.service_name
        self._metrics["errors_total"].labels(error_type=error_type, service=service_name).inc()

    def record_cache_lookup(self, entity: str, result: str):
        """Record a cache lookup outcome (hit, miss or error)."""
        self._metrics["cache_lookups_total"].labels(entity=entity, result=result).inc()

    def record_origin_request(self, operation: str, status: str):
        """Record an origin API call outcome."""
        self._metrics["origin_requests_total"].labels(operation=operation, status=status).inc()

    def record_refresh(self, loop: str, outcome: str, duration: float):
        """Record a background refresh run."""
        self._metrics["refresh_runs_total"].labels(loop=loop, outcome=outcome).inc()
        self._metrics["refresh_duration_seconds"].labels(loop=loop).observe(duration)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
