"""Infrastructure layer - cross-cutting concerns."""

from simpledb.infrastructure.config import Config, get_config
from simpledb.infrastructure.logging import setup_logging, get_logger
from simpledb.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from simpledb.infrastructure.tracing import setup_tracing, shutdown_tracing, get_tracer, trace_span

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "shutdown_tracing",
    "get_tracer",
    "trace_span",
]
