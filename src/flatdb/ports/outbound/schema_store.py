"""Schema Store port for per-table column metadata.

The schema store owns a table's metadata artifact: one line per column,
in declaration order, matching the header of the table's data artifact.

The schema store is responsible for:
- Publishing a new table's column list atomically
- Reading the column list back in order
- Answering column membership questions
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol, Sequence

from flatdb.domain.entities import Column, TableSchema


class SchemaStore(Protocol):
    """Protocol for reading and writing table metadata.

    Thread Safety:
        Implementations need not be thread-safe. Callers serialize access
        per table with TableLockManager.
    """

    @abstractmethod
    def create(self, table_name: str, columns: Sequence[Column]) -> TableSchema:
        """Publish the metadata artifact for a new table.

        The artifact is written to a temporary path and renamed into place,
        so a concurrent reader never observes a partial schema.

        Args:
            table_name: The table being created.
            columns: Column definitions in declaration order.

        Returns:
            The stored schema.

        Raises:
            ValidationError: If the column set breaks a schema rule.
            ConflictError: If metadata for the table already exists.
            StorageIOError: If the publish fails.
        """
        ...

    @abstractmethod
    def read(self, table_name: str) -> TableSchema:
        """Read a table's columns in declaration order.

        Raises:
            NotFoundError: If the table has no metadata artifact.
            StorageIOError: If the artifact cannot be read or parsed.
        """
        ...

    @abstractmethod
    def column_exists(self, table_name: str, column_name: str) -> bool:
        """Case-insensitive column membership test.

        Returns False if the table has no metadata artifact.
        """
        ...

    @abstractmethod
    def exists(self, table_name: str) -> bool:
        """Check whether the table has a metadata artifact."""
        ...

    @abstractmethod
    def delete(self, table_name: str) -> bool:
        """Remove the metadata artifact.

        Returns:
            True if an artifact was removed, False if none existed.

        Raises:
            StorageIOError: If removal fails.
        """
        ...
