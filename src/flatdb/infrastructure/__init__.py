"""Infrastructure layer - cross-cutting concerns."""

from flatdb.infrastructure.config import Config, get_config
from flatdb.infrastructure.logging import setup_logging, get_logger, log_context
from flatdb.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from flatdb.infrastructure.tracing import setup_tracing, get_tracer, trace_span

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "get_logger",
    "log_context",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "trace_span",
]
