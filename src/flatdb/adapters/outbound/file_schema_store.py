"""File-based Schema Store implementation.

This adapter implements the SchemaStore protocol with one metadata
artifact per table.

File Format:
    Line 1:     Column_Name|Column_Type|Primary_Key|Not_Null|Unique
    Lines 2..N: one column per line, flags as yes/no, e.g. id|int|yes|yes|yes
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from flatdb.adapters.outbound.atomic_file import atomic_write_lines
from flatdb.adapters.outbound.table_layout import TableLayout
from flatdb.domain.entities import Column, TableSchema
from flatdb.domain.errors import ConflictError, NotFoundError, StorageIOError
from flatdb.domain.services.validator import validate_column_set
from flatdb.domain.value_objects import METADATA_HEADER


class FileSchemaStore:
    """File-based implementation of the SchemaStore protocol."""

    def __init__(
        self,
        layout: TableLayout,
        file_mode: int = 0o644,
        fsync: bool = True,
    ) -> None:
        """Initialize the schema store.

        Args:
            layout: Artifact naming for the database directory.
            file_mode: Mode for published metadata artifacts.
            fsync: Whether to fsync before publishing.
        """
        self._layout = layout
        self._file_mode = file_mode
        self._fsync = fsync

    def create(self, table_name: str, columns: Sequence[Column]) -> TableSchema:
        """Publish the metadata artifact for a new table."""
        validate_column_set(columns)

        path = self._layout.metadata_path(table_name)
        if path.exists():
            raise ConflictError(
                f"Table '{table_name}' already exists", field=table_name, rule="exists"
            )

        atomic_write_lines(
            path,
            [METADATA_HEADER, *(column.to_line() for column in columns)],
            temp_prefix=self._layout.temp_prefix,
            file_mode=self._file_mode,
            fsync=self._fsync,
        )
        return TableSchema.of(table_name, columns)

    def read(self, table_name: str) -> TableSchema:
        """Read a table's columns in declaration order."""
        path = self._layout.metadata_path(table_name)
        if not path.is_file():
            raise NotFoundError(
                f"Table '{table_name}' has no metadata", field=table_name, rule="exists"
            )

        try:
            lines = [line for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]
        except OSError as exc:
            raise StorageIOError(
                f"Cannot read metadata for '{table_name}': {exc}", field=table_name, rule="io"
            ) from exc
        except UnicodeDecodeError as exc:
            raise StorageIOError(
                f"Metadata for '{table_name}' is not valid UTF-8: {exc.reason}",
                field=table_name,
                rule="corrupt",
            ) from exc

        if not lines or lines[0].strip() != METADATA_HEADER:
            raise StorageIOError(
                f"Metadata for '{table_name}' is missing its header line",
                field=table_name,
                rule="corrupt",
            )

        try:
            columns = [Column.from_line(line) for line in lines[1:]]
        except ValueError as exc:
            raise StorageIOError(
                f"Metadata for '{table_name}' is malformed: {exc}", field=table_name, rule="corrupt"
            ) from exc

        return TableSchema.of(table_name, columns)

    def column_exists(self, table_name: str, column_name: str) -> bool:
        """Case-insensitive column membership test."""
        if not self.exists(table_name):
            return False
        return self.read(table_name).has_column(column_name)

    def exists(self, table_name: str) -> bool:
        """Check whether the table has a metadata artifact."""
        return self._layout.metadata_path(table_name).is_file()

    def delete(self, table_name: str) -> bool:
        """Remove the metadata artifact."""
        path: Path = self._layout.metadata_path(table_name)
        try:
            existed = path.exists()
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageIOError(
                f"Cannot remove metadata for '{table_name}': {exc}", field=table_name, rule="io"
            ) from exc
        return existed
