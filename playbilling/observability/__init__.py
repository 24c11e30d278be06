"""
Observability module - Logging, Metrics, and Tracing.
"""

from playbilling.observability.logging import get_logger, log_context, setup_logging
from playbilling.observability.metrics import ResolverMetrics, metrics
from playbilling.observability.tracing import get_tracer, setup_tracing

__all__ = [
    "get_logger",
    "log_context",
    "setup_logging",
    "metrics",
    "ResolverMetrics",
    "get_tracer",
    "setup_tracing",
]
