"""Prometheus metrics for SimpleDB."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all SimpleDB metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Operation metrics
        self.operations_total = Counter(
            "simpledb_operations_total",
            "Total number of database operations",
            ["operation", "status"],  # status: success, error
            registry=self._registry,
        )

        self.operation_latency_seconds = Histogram(
            "simpledb_operation_latency_seconds",
            "Operation latency in seconds",
            ["operation"],
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
            registry=self._registry,
        )

        self.tables = Gauge(
            "simpledb_tables",
            "Number of tables currently defined",
            registry=self._registry,
        )

        # WAL metrics
        self.wal_appends_total = Counter(
            "simpledb_wal_appends_total",
            "Total WAL entries appended",
            ["operation"],
            registry=self._registry,
        )

        self.wal_bytes_written_total = Counter(
            "simpledb_wal_bytes_written_total",
            "Total WAL bytes written",
            registry=self._registry,
        )

        self.wal_flush_latency_seconds = Histogram(
            "simpledb_wal_flush_latency_seconds",
            "WAL flush latency in seconds",
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1),
            registry=self._registry,
        )

        # Snapshot metrics
        self.snapshot_save_seconds = Histogram(
            "simpledb_snapshot_save_seconds",
            "Snapshot save duration in seconds",
            buckets=(0.001, 0.01, 0.1, 0.5, 1.0, 5.0, 10.0),
            registry=self._registry,
        )

        self.snapshot_load_seconds = Histogram(
            "simpledb_snapshot_load_seconds",
            "Snapshot load duration in seconds",
            buckets=(0.001, 0.01, 0.1, 0.5, 1.0, 5.0, 10.0),
            registry=self._registry,
        )

        # Recovery metrics
        self.recovery_duration_seconds = Gauge(
            "simpledb_recovery_duration_seconds",
            "Duration of last recovery in seconds",
            registry=self._registry,
        )

        self.recovery_entries_replayed = Counter(
            "simpledb_recovery_entries_replayed_total",
            "Total WAL entries replayed during recovery",
            registry=self._registry,
        )

        self.info = Info(
            "simpledb",
            "SimpleDB information",
            registry=self._registry,
        )


_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from simpledb import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
