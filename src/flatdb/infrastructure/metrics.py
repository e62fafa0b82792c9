"""Prometheus metrics for flatdb.

Metrics live in an in-process registry only. Callers that want to export
them can render the registry with ``prometheus_client.generate_latest``.
"""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all flatdb metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Operation metrics
        self.operations_total = Counter(
            "flatdb_operations_total",
            "Total number of table and database operations",
            ["operation", "status"],  # status: success, error
            registry=self._registry,
        )

        self.operation_latency_seconds = Histogram(
            "flatdb_operation_latency_seconds",
            "Operation latency in seconds",
            ["operation"],
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
            registry=self._registry,
        )

        self.rejections_total = Counter(
            "flatdb_rejections_total",
            "Operations rejected before commit",
            ["operation", "rule"],
            registry=self._registry,
        )

        # Uniqueness scans are linear; this tracks how many rows they touch
        self.rows_scanned_total = Counter(
            "flatdb_rows_scanned_total",
            "Rows read by PRIMARY KEY / UNIQUE scans",
            registry=self._registry,
        )

        # Lock metrics
        self.lock_wait_seconds = Histogram(
            "flatdb_lock_wait_seconds",
            "Time spent waiting for table locks",
            ["mode"],  # shared, exclusive
            buckets=(0.0001, 0.001, 0.01, 0.1, 0.5, 1.0, 5.0, 30.0),
            registry=self._registry,
        )

        self.info = Info(
            "flatdb",
            "flatdb build information",
            registry=self._registry,
        )

    def set_build_info(self) -> None:
        """Publish the package version as flatdb_info."""
        from flatdb import __version__

        self.info.info({"version": __version__})

    @property
    def registry(self) -> CollectorRegistry:
        """The underlying collector registry."""
        return self._registry


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up the global metrics registry.

    Args:
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    # The default REGISTRY rejects duplicate collectors, so reuse it
    if _metrics is None or registry is not None:
        _metrics = MetricsRegistry(registry)

    _metrics.set_build_info()
    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
