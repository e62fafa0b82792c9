"""File-based Record Store implementation.

This adapter implements the RecordStore protocol with one data artifact
per table.

File Format:
    Line 1:     column names joined by "|"
    Lines 2..N: one row per line, cells joined by "|", no escaping

Appends go straight to the end of the artifact. Replacing or deleting a
row republishes the whole artifact through a temporary file and rename,
so an interrupted rewrite never leaves a half-written table behind.
Blank lines are ignored on read and dropped on rewrite.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence

from flatdb.adapters.outbound.atomic_file import atomic_write_lines
from flatdb.adapters.outbound.table_layout import TableLayout
from flatdb.domain.entities import Row, TableData, decode_row, encode_row
from flatdb.domain.errors import (
    ConflictError,
    NotFoundError,
    StorageIOError,
    ValidationError,
)
from flatdb.domain.value_objects import NULL


class FileRecordStore:
    """File-based implementation of the RecordStore protocol."""

    def __init__(
        self,
        layout: TableLayout,
        file_mode: int = 0o644,
        fsync: bool = True,
    ) -> None:
        """Initialize the record store.

        Args:
            layout: Artifact naming for the database directory.
            file_mode: Mode for published data artifacts.
            fsync: Whether to fsync appends and rewrites.
        """
        self._layout = layout
        self._file_mode = file_mode
        self._fsync = fsync

    def create_empty(self, table_name: str, column_names: Sequence[str]) -> None:
        """Publish a header-only data artifact."""
        path = self._layout.data_path(table_name)
        if path.exists():
            raise ConflictError(
                f"Table '{table_name}' already exists", field=table_name, rule="exists"
            )
        self._publish(table_name, [encode_row(column_names)])

    def append_row(self, table_name: str, row: Sequence[str]) -> None:
        """Append one row to the end of the data artifact."""
        path = self._require(table_name)
        try:
            line = encode_row(row).encode("utf-8") + b"\n"
            with open(path, "ab+") as handle:
                handle.seek(0, os.SEEK_END)
                if handle.tell() > 0:
                    handle.seek(-1, os.SEEK_END)
                    if handle.read(1) != b"\n":
                        # Never let the new row merge with an unterminated line
                        line = b"\n" + line
                handle.write(line)
                handle.flush()
                if self._fsync:
                    os.fsync(handle.fileno())
        except OSError as exc:
            raise StorageIOError(
                f"Cannot append to '{table_name}': {exc}", field=table_name, rule="io"
            ) from exc
        except UnicodeEncodeError as exc:
            raise StorageIOError(
                f"Cannot encode row for '{table_name}': {exc.reason}",
                field=table_name,
                rule="encoding",
            ) from exc

    def read_all(self, table_name: str) -> TableData:
        """Read the header and every row."""
        path = self._require(table_name)
        try:
            # Rows end in "\n" only; cells may hold other line separators
            lines = [line.rstrip("\r") for line in path.read_text(encoding="utf-8").split("\n")]
        except OSError as exc:
            raise StorageIOError(
                f"Cannot read '{table_name}': {exc}", field=table_name, rule="io"
            ) from exc
        except UnicodeDecodeError as exc:
            raise StorageIOError(
                f"Table '{table_name}' is not valid UTF-8: {exc.reason}",
                field=table_name,
                rule="corrupt",
            ) from exc

        if not lines[0]:
            raise StorageIOError(
                f"Table '{table_name}' is missing its header line", field=table_name, rule="corrupt"
            )

        return TableData(
            header=decode_row(lines[0]),
            rows=[decode_row(line) for line in lines[1:] if line != ""],
        )

    def row_count(self, table_name: str) -> int:
        """Number of data rows, excluding the header."""
        return len(self.read_all(table_name))

    def replace_row(self, table_name: str, row_index: int, new_row: Sequence[str]) -> Row:
        """Replace exactly one row and republish the artifact."""
        data = self.read_all(table_name)
        self._check_row_index(table_name, data, row_index)

        before = data.rows[row_index - 1]
        data.rows[row_index - 1] = list(new_row)
        self._publish(table_name, data.to_lines())
        return before

    def delete_row(self, table_name: str, row_index: int) -> Row:
        """Remove exactly one row and republish the artifact."""
        data = self.read_all(table_name)
        self._check_row_index(table_name, data, row_index)

        removed = data.rows.pop(row_index - 1)
        self._publish(table_name, data.to_lines())
        return removed

    def column_values(
        self,
        table_name: str,
        column_index: int,
        exclude_row_index: int | None = None,
    ) -> list[str]:
        """Collect one column's values by linear scan."""
        data = self.read_all(table_name)
        return [
            row[column_index] if column_index < len(row) else NULL
            for position, row in enumerate(data.rows, start=1)
            if position != exclude_row_index
        ]

    def exists(self, table_name: str) -> bool:
        """Check whether the table has a data artifact."""
        return self._layout.data_path(table_name).is_file()

    def drop(self, table_name: str) -> None:
        """Remove the data and metadata artifacts together."""
        data_path = self._layout.data_path(table_name)
        metadata_path = self._layout.metadata_path(table_name)
        if not data_path.exists() and not metadata_path.exists():
            raise NotFoundError(
                f"Table '{table_name}' does not exist", field=table_name, rule="exists"
            )

        try:
            data_path.unlink(missing_ok=True)
            metadata_path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageIOError(
                f"Cannot drop '{table_name}': {exc}", field=table_name, rule="io"
            ) from exc

    def _require(self, table_name: str) -> Path:
        path = self._layout.data_path(table_name)
        if not path.is_file():
            raise NotFoundError(
                f"Table '{table_name}' does not exist", field=table_name, rule="exists"
            )
        return path

    def _publish(self, table_name: str, lines: list[str]) -> None:
        atomic_write_lines(
            self._layout.data_path(table_name),
            lines,
            temp_prefix=self._layout.temp_prefix,
            file_mode=self._file_mode,
            fsync=self._fsync,
        )

    @staticmethod
    def _check_row_index(table_name: str, data: TableData, row_index: int) -> None:
        if not 1 <= row_index <= len(data):
            raise ValidationError(
                f"Invalid row number {row_index} for '{table_name}' "
                f"(expected 1..{len(data)})",
                field=table_name,
                rule="row_index",
            )
