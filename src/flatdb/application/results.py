"""Structured results returned to the UI layer.

Every public TableManager / DatabaseManager operation returns an
OperationResult: either success with an optional payload, or the typed
error that rejected the operation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from flatdb.domain.entities import Row
from flatdb.domain.errors import FlatDBError


T = TypeVar("T")


@dataclass
class OperationResult(Generic[T]):
    """Outcome of one operation."""

    success: bool
    payload: T | None = None
    error: FlatDBError | None = None

    @classmethod
    def ok(cls, payload: T | None = None) -> OperationResult[T]:
        return cls(success=True, payload=payload)

    @classmethod
    def fail(cls, error: FlatDBError) -> OperationResult[T]:
        return cls(success=False, error=error)

    @property
    def message(self) -> str:
        """Human-readable status."""
        if self.error is not None:
            return self.error.message
        return "OK"

    def unwrap(self) -> T | None:
        """Return the payload, re-raising the error of a failed result."""
        if self.error is not None:
            raise self.error
        return self.payload


@dataclass(frozen=True)
class TableInfo:
    """A table and its current row count."""

    name: str
    row_count: int


@dataclass(frozen=True)
class DatabaseInfo:
    """A database and the number of tables it holds."""

    name: str
    table_count: int


@dataclass
class SelectResult:
    """Rows returned by a select, with the names of the returned columns."""

    columns: list[str]
    rows: list[Row] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def as_dicts(self) -> list[dict[str, str]]:
        """Rows keyed by column name."""
        return [dict(zip(self.columns, row)) for row in self.rows]


@dataclass(frozen=True)
class CellUpdate:
    """A committed cell update, with the row before and after."""

    row_index: int
    column: str
    before: Row
    after: Row


@dataclass
class RowOutcome:
    """Result of one row in a batch insert (1-based position in the batch)."""

    position: int
    success: bool
    row: Row | None = None
    error: FlatDBError | None = None
