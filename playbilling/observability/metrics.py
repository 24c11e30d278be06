"""
Metrics Collection with Prometheus.

Exposes purchase query and notification metrics for monitoring.
"""

from typing import Callable

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, Info

from playbilling.config import settings


class ResolverMetrics:
    """
    Centralized metrics for the purchase resolver.

    Covers:
    - Upstream purchase queries (rate, duration, outcome)
    - Developer notifications (rate, ignored vs re-queried)
    - Errors by normalized kind
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize all Prometheus metrics on the given registry."""
        registry = registry if registry is not None else REGISTRY

        self.service_info = Info(
            "playbilling_service",
            "Service information",
            registry=registry,
        )
        self.service_info.info(
            {
                "version": settings.service_version,
                "service_name": settings.service_name,
            }
        )

        # ====================================================================
        # Query Metrics
        # ====================================================================
        self.purchase_queries_total = Counter(
            "playbilling_purchase_queries_total",
            "Total purchase queries sent to the Play Developer API",
            ["sku_type", "outcome"],
            registry=registry,
        )

        self.purchase_query_duration_seconds = Histogram(
            "playbilling_purchase_query_duration_seconds",
            "Play Developer API query duration in seconds",
            ["sku_type"],
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
            registry=registry,
        )

        # ====================================================================
        # Notification Metrics
        # ====================================================================
        self.notifications_total = Counter(
            "playbilling_notifications_total",
            "Total developer notifications processed",
            ["notification_type", "action"],
            registry=registry,
        )

        # ====================================================================
        # Error Metrics
        # ====================================================================
        self.errors_total = Counter(
            "playbilling_errors_total",
            "Total errors by type",
            ["error_type", "operation"],
            registry=registry,
        )

    def record_query(self, sku_type: str, outcome: str, duration: float) -> None:
        """Record an upstream query and how it ended."""
        self.purchase_queries_total.labels(sku_type=sku_type, outcome=outcome).inc()
        self.purchase_query_duration_seconds.labels(sku_type=sku_type).observe(duration)

    def record_notification(self, notification_type: str, action: str) -> None:
        """Record a processed developer notification."""
        self.notifications_total.labels(notification_type=notification_type, action=action).inc()

    def record_error(self, error_type: str, operation: str) -> None:
        """Record error occurrence."""
        self.errors_total.labels(error_type=error_type, operation=operation).inc()


# Global metrics instance
metrics = ResolverMetrics()


def get_metrics_handler(registry: CollectorRegistry | None = None) -> Callable[[], bytes]:
    """
    Get a Prometheus exposition handler for whatever server hosts the resolver.

    Usage:
        handler = get_metrics_handler()
        body = handler()
    """
    from prometheus_client import generate_latest

    target = registry if registry is not None else REGISTRY

    def metrics_endpoint() -> bytes:
        return generate_latest(target)

    return metrics_endpoint
