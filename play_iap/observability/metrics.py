"""
Metrics Collection with Prometheus.

Exposes API and Google Play call metrics for monitoring.
"""

from enum import Enum

from prometheus_client import REGISTRY, Counter, Gauge, Histogram, Info, generate_latest

from play_iap.config import settings


class MetricLabels(str, Enum):
    """Standard metric label names."""

    ENDPOINT = "endpoint"
    METHOD = "method"
    STATUS_CODE = "status_code"
    OPERATION = "operation"
    OUTCOME = "outcome"
    ERROR_TYPE = "error_type"


class ReceiptMetrics:
    """
    Centralized metrics for the receipt API.

    Covers:
    - HTTP requests (rate, duration, in progress)
    - Google Play operations (rate by outcome, duration)
    - Upstream status codes
    - Errors by type
    """

    def __init__(self) -> None:
        self.service_info = Info(
            "play_iap_service",
            "Service information",
        )
        self.service_info.info(
            {
                "version": settings.api_version,
                "service_name": settings.service_name,
            }
        )

        # HTTP Metrics
        self.http_requests_total = Counter(
            "play_iap_http_requests_total",
            "Total HTTP requests",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD, MetricLabels.STATUS_CODE],
        )

        self.http_request_duration_seconds = Histogram(
            "play_iap_http_request_duration_seconds",
            "HTTP request duration in seconds",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
        )

        self.http_requests_in_progress = Gauge(
            "play_iap_http_requests_in_progress",
            "Number of HTTP requests currently being processed",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD],
        )

        # Google Play Operation Metrics
        self.provider_operations_total = Counter(
            "play_iap_provider_operations_total",
            "Total Google Play operations",
            [MetricLabels.OPERATION, MetricLabels.OUTCOME],
        )

        self.provider_operation_duration_seconds = Histogram(
            "play_iap_provider_operation_duration_seconds",
            "Google Play operation duration in seconds",
            [MetricLabels.OPERATION],
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
        )

        self.upstream_responses_total = Counter(
            "play_iap_upstream_responses_total",
            "Google Play API responses by status code",
            [MetricLabels.OPERATION, MetricLabels.STATUS_CODE],
        )

        # Error Metrics
        self.errors_total = Counter(
            "play_iap_errors_total",
            "Total errors",
            [MetricLabels.ERROR_TYPE, MetricLabels.OPERATION],
        )

    def record_http_request(
        self, endpoint: str, method: str, status_code: int, duration: float
    ) -> None:
        """Record HTTP request metrics."""
        self.http_requests_total.labels(
            endpoint=endpoint, method=method, status_code=str(status_code)
        ).inc()
        self.http_request_duration_seconds.labels(endpoint=endpoint, method=method).observe(
            duration
        )

    def record_operation(self, operation: str, outcome: str, duration: float) -> None:
        """Record a Google Play operation and its outcome."""
        self.provider_operations_total.labels(operation=operation, outcome=outcome).inc()
        self.provider_operation_duration_seconds.labels(operation=operation).observe(duration)

    def record_upstream_status(self, operation: str, status_code: int) -> None:
        """Record the status code Google Play answered with."""
        self.upstream_responses_total.labels(
            operation=operation, status_code=str(status_code)
        ).inc()

    def record_error(self, error_type: str, operation: str) -> None:
        """Record error occurrence."""
        self.errors_total.labels(error_type=error_type, operation=operation).inc()


# Global metrics instance
metrics = ReceiptMetrics()


def render_latest() -> bytes:
    """Render all registered metrics in Prometheus text format."""
    return generate_latest(REGISTRY)
