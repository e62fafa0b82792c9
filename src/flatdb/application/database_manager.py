"""Database Manager - databases under the configured root.

A database is a directory under ``storage.databases_root``. Creation is
atomic: a hidden temporary directory is made first and then renamed into
place, so a half-created database is never visible. Dropping removes the
whole directory tree while the database's exclusive lock is held, so no
table operation can run inside it at the same time.

sweep_temp_artifacts removes staging directories and temp files that a
crashed process left behind; FlatDB.start runs it once.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from flatdb.adapters.outbound import TableLayout, sweep_temp_artifacts
from flatdb.application.instrumentation import OperationRunner, lock_wait_observer
from flatdb.application.results import DatabaseInfo, OperationResult
from flatdb.application.session import SessionContext
from flatdb.domain.errors import ConflictError, NotFoundError, StorageIOError
from flatdb.domain.services import TableLockManager, validate_identifier, validate_safe_name
from flatdb.domain.value_objects import IdentifierKind, LockMode
from flatdb.infrastructure.config import Config, get_config
from flatdb.infrastructure.logging import get_logger
from flatdb.infrastructure.metrics import MetricsRegistry, get_metrics


logger = get_logger(__name__)


class DatabaseManager:
    """Create, select, drop and list databases."""

    def __init__(
        self,
        config: Config | None = None,
        locks: TableLockManager | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._config = config or get_config()
        self._metrics = metrics or get_metrics()
        self._locks = locks or TableLockManager(
            timeout_seconds=self._config.locks.timeout_seconds,
            wait_observer=lock_wait_observer(self._metrics),
        )
        self._runner = OperationRunner("database", self._metrics, logger)

    @property
    def root(self) -> Path:
        """Directory holding one sub-directory per database."""
        return Path(self._config.storage.databases_root)

    def ensure_root(self) -> None:
        """Create the databases root if it is missing.

        Raises:
            StorageIOError: If the directory cannot be created.
        """
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            os.chmod(self.root, self._config.storage.dir_mode)
        except OSError as exc:
            raise StorageIOError(
                f"Cannot create databases root {self.root}: {exc}", rule="io"
            ) from exc

    def sweep_temp_artifacts(self) -> OperationResult[int]:
        """Remove temp artifacts left behind by a process that died mid-publish.

        Covers staging directories under the root and temp files inside
        each database. Each database is swept under its exclusive lock.

        Returns:
            Result whose payload is the number of entries removed.
        """

        def body() -> int:
            if not self.root.is_dir():
                return 0

            temp_prefix = self._config.storage.temp_prefix
            removed = len(sweep_temp_artifacts(self.root, temp_prefix))
            for name in self._database_names():
                session = self._session(name)
                with self._locks.database(session.lock_key, LockMode.EXCLUSIVE):
                    if session.database_path.is_dir():
                        removed += len(sweep_temp_artifacts(session.database_path, temp_prefix))

            if removed:
                logger.warning("temp_artifacts_swept", removed=removed)
            return removed

        return self._runner.run("sweep_temp_artifacts", body)

    def create_database(self, name: str) -> OperationResult[SessionContext]:
        """Create an empty database and select it."""

        def body() -> SessionContext:
            self._check_name(name)
            self.ensure_root()
            session = self._session(name)
            storage = self._config.storage

            with self._locks.database(session.lock_key, LockMode.EXCLUSIVE):
                if session.database_path.exists():
                    raise ConflictError(
                        f"Database '{name}' already exists", field=name, rule="exists"
                    )

                staging = None
                try:
                    staging = tempfile.mkdtemp(prefix=f"{storage.temp_prefix}{name}_", dir=self.root)
                    os.chmod(staging, storage.dir_mode)
                    os.rename(staging, session.database_path)
                except OSError as exc:
                    if staging is not None:
                        shutil.rmtree(staging, ignore_errors=True)
                    raise StorageIOError(
                        f"Cannot create database '{name}': {exc}", field=name, rule="io"
                    ) from exc

            logger.info("database_created", database=name)
            return session

        return self._runner.run("create_database", body, database=name)

    def select_database(self, name: str) -> OperationResult[SessionContext]:
        """Select an existing database."""

        def body() -> SessionContext:
            self._check_name(name)
            session = self._session(name)
            self._require(session)
            return session

        return self._runner.run("select_database", body, database=name)

    def drop_database(self, name: str) -> OperationResult[int]:
        """Remove a database and every table in it.

        Returns:
            Result whose payload is the number of tables dropped.
        """

        def body() -> int:
            self._check_name(name)
            session = self._session(name)

            with self._locks.database(session.lock_key, LockMode.EXCLUSIVE):
                self._require(session)
                table_count = len(self._layout(session).table_names())
                try:
                    shutil.rmtree(session.database_path)
                except OSError as exc:
                    raise StorageIOError(
                        f"Cannot drop database '{name}': {exc}", field=name, rule="io"
                    ) from exc

            logger.info("database_dropped", database=name, tables=table_count)
            return table_count

        return self._runner.run("drop_database", body, database=name)

    def list_databases(self) -> OperationResult[list[DatabaseInfo]]:
        """Databases under the root with their table counts, sorted by name."""

        def body() -> list[DatabaseInfo]:
            if not self.root.is_dir():
                return []

            databases = []
            for name in self._database_names():
                session = self._session(name)
                with self._locks.database(session.lock_key, LockMode.SHARED):
                    if not session.database_path.is_dir():
                        continue
                    table_count = len(self._layout(session).table_names())
                databases.append(DatabaseInfo(name=name, table_count=table_count))
            return databases

        return self._runner.run("list_databases", body)

    def _database_names(self) -> list[str]:
        try:
            return sorted(
                entry.name
                for entry in self.root.iterdir()
                if entry.is_dir() and not entry.name.startswith(".")
            )
        except OSError as exc:
            raise StorageIOError(f"Cannot list {self.root}: {exc}", rule="io") from exc

    def _session(self, name: str) -> SessionContext:
        return SessionContext(databases_root=self.root, database=name)

    def _layout(self, session: SessionContext) -> TableLayout:
        storage = self._config.storage
        return TableLayout(
            session.database_path,
            metadata_prefix=storage.metadata_prefix,
            temp_prefix=storage.temp_prefix,
        )

    @staticmethod
    def _check_name(name: str) -> None:
        validate_identifier(name, IdentifierKind.DATABASE)
        validate_safe_name(name)

    @staticmethod
    def _require(session: SessionContext) -> None:
        if not session.database_path.is_dir():
            raise NotFoundError(
                f"Database '{session.database}' does not exist",
                field=session.database,
                rule="exists",
            )
