"""Table Manager - table operations on the selected database.

The TableManager orchestrates the schema and record stores for one table
at a time. Every mutation is two-phase:

    1. Validate: identifier, type, NOT NULL and uniqueness checks run with
       no side effects. The first failing rule rejects the operation.
    2. Commit: exactly one filesystem mutation (append, atomic republish
       or unlink).

The table's exclusive lock is held across both phases, so no other writer
can commit between the uniqueness scan and the append. Reads hold the
table's shared lock.

Usage:
    tables = TableManager(config, locks)
    result = tables.insert_row(session, "users", ["1", "Alice", "30"])
    if not result.success:
        print(result.message)
"""

from __future__ import annotations

from typing import Iterable, Sequence

from flatdb.adapters.outbound import FileRecordStore, FileSchemaStore, TableLayout
from flatdb.application.instrumentation import OperationRunner, lock_wait_observer
from flatdb.application.results import (
    CellUpdate,
    OperationResult,
    RowOutcome,
    SelectResult,
    TableInfo,
)
from flatdb.application.session import SessionContext
from flatdb.domain.entities import (
    Column,
    Row,
    SelectAll,
    SelectColumn,
    SelectMode,
    SelectWhere,
    TableSchema,
)
from flatdb.domain.errors import (
    ConflictError,
    FlatDBError,
    NotFoundError,
    StorageIOError,
    ValidationError,
)
from flatdb.domain.services import (
    TableLockManager,
    validate_column_set,
    validate_encodable,
    validate_identifier,
    validate_not_null,
    validate_safe_name,
    validate_type,
)
from flatdb.domain.value_objects import NULL, IdentifierKind, LockMode
from flatdb.infrastructure.config import Config, get_config
from flatdb.infrastructure.logging import get_logger
from flatdb.infrastructure.metrics import MetricsRegistry, get_metrics
from flatdb.ports.outbound import RecordStore, SchemaStore


logger = get_logger(__name__)


class TableManager:
    """Create, modify, query and drop tables.

    Thread Safety:
        Safe to share between threads as long as every manager touching the
        same databases shares one TableLockManager.
    """

    def __init__(
        self,
        config: Config | None = None,
        locks: TableLockManager | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the table manager.

        Args:
            config: Configuration; the global config if None.
            locks: Lock table shared with the DatabaseManager.
            metrics: Metrics registry; the global registry if None.
        """
        self._config = config or get_config()
        self._metrics = metrics or get_metrics()
        self._locks = locks or TableLockManager(
            timeout_seconds=self._config.locks.timeout_seconds,
            wait_observer=lock_wait_observer(self._metrics),
        )
        self._runner = OperationRunner("table", self._metrics, logger)

    @property
    def locks(self) -> TableLockManager:
        """The lock table used by this manager."""
        return self._locks

    # =========================================================================
    # Schema operations
    # =========================================================================

    def create_table(
        self,
        session: SessionContext,
        table_name: str,
        columns: Sequence[Column],
    ) -> OperationResult[TableSchema]:
        """Create a table from an ordered column list.

        The metadata artifact is published first, then the header-only data
        artifact. If the data artifact cannot be published, the metadata is
        removed again.
        """

        def body() -> TableSchema:
            validate_identifier(table_name, IdentifierKind.TABLE)
            validate_safe_name(table_name)
            column_list = list(columns)
            validate_column_set(column_list)
            self._require_database(session)

            schema_store, record_store = self._stores(session)
            with self._locks.table(session.lock_key, table_name, LockMode.EXCLUSIVE):
                if record_store.exists(table_name):
                    raise ConflictError(
                        f"Table '{table_name}' already exists", field=table_name, rule="exists"
                    )
                if schema_store.exists(table_name):
                    # Leftover of an interrupted create
                    logger.warning(
                        "orphan_metadata_removed", database=session.database, table=table_name
                    )
                    schema_store.delete(table_name)

                schema = schema_store.create(table_name, column_list)
                try:
                    record_store.create_empty(table_name, schema.column_names)
                except FlatDBError as exc:
                    self._discard_metadata(schema_store, session, table_name)
                    raise StorageIOError(
                        f"Failed to create table '{table_name}': {exc.message}",
                        field=table_name,
                        rule="io",
                    ) from exc

            logger.info(
                "table_created",
                database=session.database,
                table=table_name,
                columns=schema.column_names,
                primary_key=schema.primary_key.name if schema.primary_key else None,
            )
            return schema

        return self._runner.run(
            "create_table", body, database=session.database, table=table_name
        )

    def describe_table(
        self,
        session: SessionContext,
        table_name: str,
    ) -> OperationResult[TableSchema]:
        """Columns of a table with their types and constraints."""

        def body() -> TableSchema:
            with self._locks.table(session.lock_key, table_name, LockMode.SHARED):
                schema, _ = self._open(session, table_name)
            return schema

        return self._runner.run(
            "describe_table", body, database=session.database, table=table_name
        )

    def drop_table(self, session: SessionContext, table_name: str) -> OperationResult[int]:
        """Remove a table's data and metadata artifacts.

        Returns:
            Result whose payload is the number of rows dropped.
        """

        def body() -> int:
            self._check_table_name(table_name)
            self._require_database(session)
            _, record_store = self._stores(session)
            with self._locks.table(session.lock_key, table_name, LockMode.EXCLUSIVE):
                if not record_store.exists(table_name):
                    raise NotFoundError(
                        f"Table '{table_name}' does not exist", field=table_name, rule="exists"
                    )
                row_count = record_store.row_count(table_name)
                record_store.drop(table_name)

            logger.info(
                "table_dropped", database=session.database, table=table_name, rows=row_count
            )
            return row_count

        return self._runner.run("drop_table", body, database=session.database, table=table_name)

    def list_tables(self, session: SessionContext) -> OperationResult[list[TableInfo]]:
        """Tables of the selected database with their row counts, sorted by name."""

        def body() -> list[TableInfo]:
            layout = self._layout(session)
            _, record_store = self._stores(session)
            self._require_database(session)

            tables = []
            with self._locks.database(session.lock_key, LockMode.SHARED):
                for name in layout.table_names():
                    with self._locks.hold((session.lock_key, name), LockMode.SHARED):
                        tables.append(TableInfo(name=name, row_count=record_store.row_count(name)))
            return tables

        return self._runner.run("list_tables", body, database=session.database)

    # =========================================================================
    # Row operations
    # =========================================================================

    def validate_row(
        self,
        session: SessionContext,
        table_name: str,
        values: Sequence[str],
    ) -> OperationResult[Row]:
        """Check a row against the table without inserting it.

        Returns:
            Result whose payload is the row as it would be stored.
        """

        def body() -> Row:
            with self._locks.table(session.lock_key, table_name, LockMode.SHARED):
                schema, record_store = self._open(session, table_name)
                return self._prepare_row(schema, record_store, values)

        return self._runner.run(
            "validate_row", body, database=session.database, table=table_name
        )

    def insert_row(
        self,
        session: SessionContext,
        table_name: str,
        values: Sequence[str],
    ) -> OperationResult[Row]:
        """Validate and append one row.

        Returns:
            Result whose payload is the stored row.
        """

        def body() -> Row:
            with self._locks.table(session.lock_key, table_name, LockMode.EXCLUSIVE):
                schema, record_store = self._open(session, table_name)
                row = self._prepare_row(schema, record_store, values)
                record_store.append_row(table_name, row)

            logger.info("row_inserted", database=session.database, table=table_name)
            return row

        return self._runner.run("insert_row", body, database=session.database, table=table_name)

    def insert_rows(
        self,
        session: SessionContext,
        table_name: str,
        rows: Iterable[Sequence[str]],
    ) -> OperationResult[list[RowOutcome]]:
        """Insert rows one by one, collecting a per-row outcome.

        Each row is validated and committed on its own. A rejected row never
        aborts the batch or undoes earlier rows.
        """
        outcomes = []
        for position, values in enumerate(rows, start=1):
            result = self.insert_row(session, table_name, values)
            outcomes.append(
                RowOutcome(
                    position=position,
                    success=result.success,
                    row=result.payload,
                    error=result.error,
                )
            )

        rejected = sum(1 for outcome in outcomes if not outcome.success)
        logger.info(
            "batch_inserted",
            database=session.database,
            table=table_name,
            inserted=len(outcomes) - rejected,
            rejected=rejected,
        )
        return OperationResult.ok(outcomes)

    def select(
        self,
        session: SessionContext,
        table_name: str,
        mode: SelectMode | None = None,
    ) -> OperationResult[SelectResult]:
        """Read rows from a table.

        Args:
            session: The selected database.
            table_name: Table to read.
            mode: SelectAll (default), SelectColumn(1-based index) or
                SelectWhere(column_name, value).
        """
        mode = mode or SelectAll()

        def body() -> SelectResult:
            with self._locks.table(session.lock_key, table_name, LockMode.SHARED):
                schema, record_store = self._open(session, table_name)
                data = record_store.read_all(table_name)

            if isinstance(mode, SelectAll):
                return SelectResult(columns=list(data.header), rows=[list(row) for row in data])

            if isinstance(mode, SelectColumn):
                index = self._column_position(schema, mode.column_index)
                return SelectResult(
                    columns=[schema[index].name],
                    rows=[[_cell(row, index)] for row in data],
                )

            if isinstance(mode, SelectWhere):
                index = schema.index_of(mode.column_name)
                if index is None:
                    raise ValidationError(
                        f"Column '{mode.column_name}' does not exist in '{table_name}'",
                        field=mode.column_name,
                        rule="column",
                    )
                return SelectResult(
                    columns=list(data.header),
                    rows=[list(row) for row in data if _cell(row, index) == mode.value],
                )

            raise ValidationError(f"Unknown select mode: {mode!r}", rule="select_mode")

        return self._runner.run("select", body, database=session.database, table=table_name)

    def update_cell(
        self,
        session: SessionContext,
        table_name: str,
        row_index: int,
        column_index: int,
        new_value: str,
    ) -> OperationResult[CellUpdate]:
        """Replace one cell, addressed by 1-based row and column numbers."""

        def body() -> CellUpdate:
            with self._locks.table(session.lock_key, table_name, LockMode.EXCLUSIVE):
                schema, record_store = self._open(session, table_name)
                data = record_store.read_all(table_name)
                self._check_row_position(table_name, len(data), row_index)
                index = self._column_position(schema, column_index)
                column = schema[index]

                before = _pad(data.row(row_index), len(schema))
                value = self._update_value(column, new_value)
                if column.requires_unique and value != NULL and value != before[index]:
                    self._check_unique(
                        table_name, record_store, index, column, value, exclude_row_index=row_index
                    )

                after = list(before)
                after[index] = value
                record_store.replace_row(table_name, row_index, after)

            logger.info(
                "cell_updated",
                database=session.database,
                table=table_name,
                row=row_index,
                field=column.name,
            )
            return CellUpdate(row_index=row_index, column=column.name, before=before, after=after)

        return self._runner.run("update_cell", body, database=session.database, table=table_name)

    def delete_row(
        self,
        session: SessionContext,
        table_name: str,
        row_index: int,
    ) -> OperationResult[Row]:
        """Remove one row by 1-based row number.

        Returns:
            Result whose payload is the removed row.
        """

        def body() -> Row:
            with self._locks.table(session.lock_key, table_name, LockMode.EXCLUSIVE):
                _, record_store = self._open(session, table_name)
                self._check_row_position(table_name, record_store.row_count(table_name), row_index)
                removed = record_store.delete_row(table_name, row_index)

            logger.info("row_deleted", database=session.database, table=table_name, row=row_index)
            return removed

        return self._runner.run("delete_row", body, database=session.database, table=table_name)

    # =========================================================================
    # Validation helpers
    # =========================================================================

    def _prepare_row(
        self,
        schema: TableSchema,
        record_store: RecordStore,
        values: Sequence[str],
    ) -> Row:
        """Validate a candidate row and return it normalised for storage."""
        if len(values) != len(schema):
            raise ValidationError(
                f"Expected {len(schema)} values for '{schema.table_name}', got {len(values)}",
                field=schema.table_name,
                rule="column_count",
            )

        row = []
        for index, (column, raw) in enumerate(zip(schema, values)):
            validate_encodable(raw, column.name)
            value = NULL if raw == "" and not column.is_not_null else raw
            if column.is_not_null:
                validate_not_null(value, column.name)
            if value != NULL:
                validate_type(value, column.type, column.name)
            if column.requires_unique and value != NULL:
                self._check_unique(schema.table_name, record_store, index, column, value)
            row.append(value)
        return row

    @staticmethod
    def _update_value(column: Column, new_value: str) -> str:
        """Normalise and check the new value of a cell."""
        validate_encodable(new_value, column.name)
        value = new_value
        if value == "":
            if column.is_primary_key:
                raise ValidationError(
                    f"Primary key '{column.name}' cannot be empty",
                    field=column.name,
                    rule="primary_key",
                )
            value = NULL

        if column.is_not_null:
            validate_not_null(value, column.name)
        if value != NULL:
            validate_type(value, column.type, column.name)
        return value

    def _check_unique(
        self,
        table_name: str,
        record_store: RecordStore,
        index: int,
        column: Column,
        value: str,
        exclude_row_index: int | None = None,
    ) -> None:
        existing = record_store.column_values(table_name, index, exclude_row_index)
        self._metrics.rows_scanned_total.inc(len(existing))
        if value not in existing:
            return

        if column.is_primary_key:
            raise ValidationError(
                f"Primary key value '{value}' already exists in column '{column.name}'",
                field=column.name,
                rule="primary_key",
            )
        raise ValidationError(
            f"Value '{value}' already exists in unique column '{column.name}'",
            field=column.name,
            rule="unique",
        )

    @staticmethod
    def _column_position(schema: TableSchema, column_index: int) -> int:
        """Convert a 1-based column number to a 0-based index."""
        if not 1 <= column_index <= len(schema):
            raise ValidationError(
                f"Invalid column number {column_index} (expected 1..{len(schema)})",
                field=schema.table_name,
                rule="column_index",
            )
        return column_index - 1

    @staticmethod
    def _check_row_position(table_name: str, row_count: int, row_index: int) -> None:
        if row_count == 0:
            raise ValidationError(
                f"Table '{table_name}' is empty", field=table_name, rule="row_index"
            )
        if not 1 <= row_index <= row_count:
            raise ValidationError(
                f"Invalid row number {row_index} (expected 1..{row_count})",
                field=table_name,
                rule="row_index",
            )

    # =========================================================================
    # Store access
    # =========================================================================

    def _layout(self, session: SessionContext) -> TableLayout:
        storage = self._config.storage
        return TableLayout(
            session.database_path,
            metadata_prefix=storage.metadata_prefix,
            temp_prefix=storage.temp_prefix,
        )

    def _stores(self, session: SessionContext) -> tuple[SchemaStore, RecordStore]:
        layout = self._layout(session)
        storage = self._config.storage
        return (
            FileSchemaStore(layout, file_mode=storage.file_mode, fsync=storage.fsync),
            FileRecordStore(layout, file_mode=storage.file_mode, fsync=storage.fsync),
        )

    def _open(
        self,
        session: SessionContext,
        table_name: str,
    ) -> tuple[TableSchema, RecordStore]:
        """Load an existing table's schema and its record store."""
        self._check_table_name(table_name)
        self._require_database(session)
        schema_store, record_store = self._stores(session)
        if not record_store.exists(table_name):
            raise NotFoundError(
                f"Table '{table_name}' does not exist", field=table_name, rule="exists"
            )
        return schema_store.read(table_name), record_store

    @staticmethod
    def _check_table_name(table_name: str) -> None:
        validate_safe_name(table_name)
        validate_identifier(table_name, IdentifierKind.TABLE)

    @staticmethod
    def _require_database(session: SessionContext) -> None:
        validate_safe_name(session.database)
        validate_identifier(session.database, IdentifierKind.DATABASE)
        if not session.database_path.is_dir():
            raise NotFoundError(
                f"Database '{session.database}' does not exist",
                field=session.database,
                rule="exists",
            )

    @staticmethod
    def _discard_metadata(
        schema_store: SchemaStore,
        session: SessionContext,
        table_name: str,
    ) -> None:
        try:
            schema_store.delete(table_name)
        except StorageIOError as exc:
            logger.error(
                "metadata_rollback_failed",
                database=session.database,
                table=table_name,
                reason=exc.message,
            )


def _cell(row: Row, index: int) -> str:
    return row[index] if index < len(row) else NULL


def _pad(row: Row, width: int) -> Row:
    return list(row) + [NULL] * (width - len(row))
