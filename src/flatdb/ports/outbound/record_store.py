"""Record Store port for per-table row data.

The record store owns a table's data artifact: a header line of column
names followed by one line per row. Row positions are 1-based over data
rows and positional (deleting a row shifts later rows up).

Scalability:
    Every lookup is a linear scan. PRIMARY KEY and UNIQUE enforcement cost
    O(rows) per insert or update; there is no index structure.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol, Sequence

from flatdb.domain.entities import Row, TableData


class RecordStore(Protocol):
    """Protocol for reading and writing table rows.

    Thread Safety:
        Implementations need not be thread-safe. Callers serialize access
        per table with TableLockManager.
    """

    @abstractmethod
    def create_empty(self, table_name: str, column_names: Sequence[str]) -> None:
        """Publish a header-only data artifact atomically.

        Raises:
            ConflictError: If the data artifact already exists.
            StorageIOError: If the publish fails.
        """
        ...

    @abstractmethod
    def append_row(self, table_name: str, row: Sequence[str]) -> None:
        """Append one row. The caller has already checked its length.

        Raises:
            NotFoundError: If the table does not exist.
            StorageIOError: If the write fails.
        """
        ...

    @abstractmethod
    def read_all(self, table_name: str) -> TableData:
        """Read the header and every row.

        Raises:
            NotFoundError: If the table does not exist.
            StorageIOError: If the artifact is unreadable or has no header.
        """
        ...

    @abstractmethod
    def row_count(self, table_name: str) -> int:
        """Number of data rows, excluding the header."""
        ...

    @abstractmethod
    def replace_row(self, table_name: str, row_index: int, new_row: Sequence[str]) -> Row:
        """Replace exactly one row.

        Args:
            table_name: The table.
            row_index: 1-based data row position.
            new_row: The full replacement row.

        Returns:
            The row that was replaced.

        Raises:
            ValidationError: If row_index is out of range.
            StorageIOError: If the rewrite fails.
        """
        ...

    @abstractmethod
    def delete_row(self, table_name: str, row_index: int) -> Row:
        """Remove exactly one row; later rows shift up by one.

        Returns:
            The removed row.

        Raises:
            ValidationError: If row_index is out of range.
            StorageIOError: If the rewrite fails.
        """
        ...

    @abstractmethod
    def column_values(
        self,
        table_name: str,
        column_index: int,
        exclude_row_index: int | None = None,
    ) -> list[str]:
        """Collect one column's values by linear scan.

        Args:
            table_name: The table.
            column_index: 0-based column position.
            exclude_row_index: 1-based row to skip (the row under update).
        """
        ...

    @abstractmethod
    def exists(self, table_name: str) -> bool:
        """Check whether the table has a data artifact."""
        ...

    @abstractmethod
    def drop(self, table_name: str) -> None:
        """Remove the data and metadata artifacts together.

        If only one of them exists it is removed without error.

        Raises:
            NotFoundError: If neither artifact exists.
            StorageIOError: If removal fails.
        """
        ...
