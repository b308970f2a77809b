"""OpenTelemetry tracing for SimpleDB.

Spans cover the slow paths (snapshot save/load, WAL replay) and every
public Database operation. Span attributes are namespaced under
"simpledb.".

Without setup_tracing() the OpenTelemetry API hands out no-op tracers, so
instrumented code costs next to nothing when tracing is off.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

ATTRIBUTE_PREFIX = "simpledb."

_tracer: trace.Tracer | None = None
_provider: TracerProvider | None = None


def setup_tracing(
    service_name: str = "simpledb",
    otlp_endpoint: str | None = None,
    console_export: bool = False,
) -> trace.Tracer:
    """
    Install a tracer provider exporting to an OTLP collector.

    Args:
        service_name: service.name resource attribute
        otlp_endpoint: Collector endpoint (e.g. "http://localhost:4317")
        console_export: Also print finished spans to stdout

    Returns:
        The tracer used by trace_span()
    """
    global _tracer, _provider

    from simpledb import __version__

    _provider = TracerProvider(
        resource=Resource.create({"service.name": service_name, "service.version": __version__})
    )
    if otlp_endpoint:
        _provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )
    if console_export:
        _provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(_provider)
    _tracer = trace.get_tracer(service_name)
    return _tracer


def shutdown_tracing() -> None:
    """Flush pending spans and stop the exporters installed by setup_tracing()."""
    global _tracer, _provider
    if _provider is not None:
        _provider.shutdown()
    _provider = None
    _tracer = None


def get_tracer() -> trace.Tracer:
    """Get the tracer, falling back to whatever provider is globally installed."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer("simpledb")
    return _tracer


@contextmanager
def trace_span(name: str, attributes: dict[str, Any] | None = None) -> Iterator[trace.Span]:
    """
    Run a block inside a span.

    Exceptions escaping the block are recorded on the span and mark it as
    failed before propagating.

    Args:
        name: Span name, e.g. "snapshot.save"
        attributes: Unprefixed attribute names and values
    """
    prefixed = {f"{ATTRIBUTE_PREFIX}{k}": v for k, v in (attributes or {}).items()}
    with get_tracer().start_as_current_span(name, attributes=prefixed) as span:
        yield span
