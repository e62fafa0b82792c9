"""Operation boundary shared by the managers.

Each public operation runs inside ``OperationRunner.run``, which:
    - opens a trace span named "<scope>.<operation>"
    - times the operation into flatdb_operation_latency_seconds
    - turns a raised FlatDBError into OperationResult.fail
    - counts the outcome and logs one structured event

Exceptions that are not FlatDBError propagate unchanged.
"""

from __future__ import annotations

import time
from typing import Any, Callable, TypeVar

import structlog

from flatdb.application.results import OperationResult
from flatdb.domain.errors import FlatDBError, StorageIOError
from flatdb.domain.value_objects import LockMode
from flatdb.infrastructure.logging import log_context
from flatdb.infrastructure.metrics import MetricsRegistry
from flatdb.infrastructure.tracing import trace_span


T = TypeVar("T")


class OperationRunner:
    """Runs operations with tracing, metrics and logging."""

    def __init__(
        self,
        scope: str,
        metrics: MetricsRegistry,
        logger: structlog.BoundLogger,
    ) -> None:
        self._scope = scope
        self._metrics = metrics
        self._logger = logger

    def run(
        self,
        operation: str,
        body: Callable[[], T],
        **context: Any,
    ) -> OperationResult[T]:
        """Run ``body`` and wrap its outcome.

        Args:
            operation: Operation name, e.g. "insert_row".
            body: The validate/commit work; raises FlatDBError to reject.
            **context: Log and span attributes (database, table, ...).
        """
        attributes = {f"flatdb.{key}": value for key, value in context.items()}
        started = time.perf_counter()
        with trace_span(f"{self._scope}.{operation}", attributes) as span:
            try:
                with log_context(operation=operation, **context):
                    payload = body()
            except FlatDBError as exc:
                span.set_attribute("flatdb.error", exc.kind)
                self._record_failure(operation, exc, context)
                return OperationResult.fail(exc)
            finally:
                self._metrics.operation_latency_seconds.labels(operation).observe(
                    time.perf_counter() - started
                )

        self._metrics.operations_total.labels(operation, "success").inc()
        return OperationResult.ok(payload)

    def _record_failure(self, operation: str, exc: FlatDBError, context: dict[str, Any]) -> None:
        self._metrics.operations_total.labels(operation, "error").inc()
        event = dict(
            context,
            operation=operation,
            error=exc.kind,
            rule=exc.rule,
            field=exc.field,
            reason=exc.message,
        )
        if isinstance(exc, StorageIOError):
            self._logger.error("operation_failed", **event)
            return

        self._metrics.rejections_total.labels(operation, exc.rule or exc.kind).inc()
        self._logger.warning("operation_rejected", **event)


def lock_wait_observer(metrics: MetricsRegistry) -> Callable[[LockMode, float], None]:
    """Build a TableLockManager wait observer feeding flatdb_lock_wait_seconds."""

    def observe(mode: LockMode, seconds: float) -> None:
        metrics.lock_wait_seconds.labels(mode.value).observe(seconds)

    return observe
