"""FlatDB - unified entry point for the table storage engine.

Wires one configuration, one lock table and one metrics registry into a
DatabaseManager and a TableManager, so both managers serialise on the
same locks.

Usage:
    from flatdb import Column, FlatDB

    with FlatDB.from_config() as db:
        session = db.databases.create_database("shop").unwrap()
        db.tables.create_table(session, "users", [
            Column("id", "int", is_primary_key=True),
            Column("name", "string", is_not_null=True),
        ])
        db.tables.insert_row(session, "users", ["1", "Alice"])
"""

from __future__ import annotations

from flatdb.application.database_manager import DatabaseManager
from flatdb.application.instrumentation import lock_wait_observer
from flatdb.application.table_manager import TableManager
from flatdb.domain.services import TableLockManager
from flatdb.infrastructure.config import Config, get_config
from flatdb.infrastructure.logging import get_logger, setup_logging
from flatdb.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from flatdb.infrastructure.tracing import setup_tracing


logger = get_logger(__name__)


class FlatDB:
    """Main engine object holding the database and table managers.

    Thread Safety:
        One instance may be shared between threads; table and database
        operations coordinate through the shared TableLockManager.
    """

    def __init__(
        self,
        config: Config | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Configuration; the global config if None.
            metrics: Metrics registry; the global registry if None.
        """
        self._config = config or get_config()
        self._metrics = metrics or get_metrics()
        self._locks = TableLockManager(
            timeout_seconds=self._config.locks.timeout_seconds,
            wait_observer=lock_wait_observer(self._metrics),
        )
        self._databases = DatabaseManager(self._config, self._locks, self._metrics)
        self._tables = TableManager(self._config, self._locks, self._metrics)
        self._started = False

    @classmethod
    def from_config(
        cls,
        config: Config | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> FlatDB:
        """Build an engine with logging, tracing and metrics set up from config."""
        config = config or get_config()
        observability = config.observability
        setup_logging(
            level=observability.log_level,
            log_format=observability.log_format,
            service_name=observability.service_name,
        )
        setup_tracing(
            service_name=observability.service_name,
            console_export=observability.trace_console_export,
        )
        if metrics is None:
            metrics = setup_metrics()
        else:
            metrics.set_build_info()
        return cls(config=config, metrics=metrics)

    @property
    def config(self) -> Config:
        return self._config

    @property
    def metrics(self) -> MetricsRegistry:
        return self._metrics

    @property
    def databases(self) -> DatabaseManager:
        """Database operations."""
        return self._databases

    @property
    def tables(self) -> TableManager:
        """Table operations; each call takes a SessionContext."""
        return self._tables

    @property
    def is_started(self) -> bool:
        return self._started

    def start(self) -> None:
        """Create the databases root and sweep leftover temp artifacts.

        Raises:
            RuntimeError: If already started.
            StorageIOError: If the root cannot be created or swept.
        """
        if self._started:
            raise RuntimeError("FlatDB already started")

        self._databases.ensure_root()
        swept = self._databases.sweep_temp_artifacts().unwrap()
        self._started = True
        logger.info(
            "engine_started", databases_root=str(self._databases.root), temp_artifacts_swept=swept
        )

    def stop(self) -> None:
        """Mark the engine stopped.

        Raises:
            RuntimeError: If not started.
        """
        if not self._started:
            raise RuntimeError("FlatDB not started")

        self._started = False
        logger.info("engine_stopped")

    def __enter__(self) -> FlatDB:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
