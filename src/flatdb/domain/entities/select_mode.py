"""Read modes understood by TableManager.select.

There is no predicate language: a select returns every row, one column of
every row, or the rows whose value in one column equals a literal.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SelectAll:
    """Every column of every row."""


@dataclass(frozen=True)
class SelectColumn:
    """One column (1-based position) of every row."""

    column_index: int


@dataclass(frozen=True)
class SelectWhere:
    """Rows whose value in ``column_name`` equals ``value`` exactly.

    The column is looked up case-insensitively; the value comparison is
    case-sensitive.
    """

    column_name: str
    value: str


SelectMode = SelectAll | SelectColumn | SelectWhere
