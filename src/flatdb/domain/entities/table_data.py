"""Row encoding and the in-memory image of a data artifact."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Sequence

from flatdb.domain.value_objects import DELIMITER


Row = list[str]


def encode_row(values: Sequence[str]) -> str:
    """Join cells into one data line (without the trailing newline).

    Cells are not escaped; a value containing the delimiter or a newline
    corrupts the line. Callers own that limitation.
    """
    return DELIMITER.join(values)


def decode_row(line: str) -> Row:
    """Split one data line into cells."""
    return line.rstrip("\r\n").split(DELIMITER)


@dataclass
class TableData:
    """Header plus data rows of a table, in file order.

    Row positions are 1-based (row 1 is the first line after the header)
    and positional: deleting a row shifts every later row up by one.
    """

    header: list[str]
    rows: list[Row] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def row(self, row_index: int) -> Row:
        """Return the row at a 1-based position."""
        if not 1 <= row_index <= len(self.rows):
            raise IndexError(f"row {row_index} out of range 1..{len(self.rows)}")
        return self.rows[row_index - 1]

    def to_lines(self) -> list[str]:
        """Encode header and rows as data lines."""
        return [encode_row(self.header), *(encode_row(row) for row in self.rows)]
