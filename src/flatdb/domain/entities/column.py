"""Column and TableSchema entities.

A TableSchema is the ordered column list of one table. Its order matches
the header line of the table's data artifact. Each column is stored as one
line of the metadata artifact:

    name|type|primary_key|not_null|unique      e.g.  id|int|yes|yes|yes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Sequence

from flatdb.domain.errors import ValidationError
from flatdb.domain.services.validator import parse_column_type
from flatdb.domain.value_objects import (
    DELIMITER,
    ColumnType,
    flag_to_text,
    text_to_flag,
)


METADATA_FIELD_COUNT = 5


@dataclass(frozen=True)
class Column:
    """A typed, constrained column definition.

    ``type`` may be given as a ColumnType or as a type name ("int",
    "bool", ...). A primary key is always NOT NULL and UNIQUE; those flags
    are forced on construction.

    Example:
        >>> col = Column("id", "int", is_primary_key=True)
        >>> col.is_unique, col.is_not_null
        (True, True)
        >>> col.to_line()
        'id|int|yes|yes|yes'
    """

    name: str
    type: ColumnType = ColumnType.STRING
    is_primary_key: bool = False
    is_not_null: bool = False
    is_unique: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.type, ColumnType):
            object.__setattr__(self, "type", parse_column_type(str(self.type), self.name))
        if self.is_primary_key:
            object.__setattr__(self, "is_not_null", True)
            object.__setattr__(self, "is_unique", True)

    @property
    def requires_unique(self) -> bool:
        """Whether values in this column must be unique across rows."""
        return self.is_primary_key or self.is_unique

    def to_line(self) -> str:
        """Serialize to one metadata line."""
        return DELIMITER.join((
            self.name,
            self.type.value,
            flag_to_text(self.is_primary_key),
            flag_to_text(self.is_not_null),
            flag_to_text(self.is_unique),
        ))

    @classmethod
    def from_line(cls, line: str) -> Column:
        """Deserialize one metadata line.

        Raises:
            ValueError: If the line does not have five fields or names an
                unknown type.
        """
        fields = [part.strip() for part in line.rstrip("\r\n").split(DELIMITER)]
        if len(fields) != METADATA_FIELD_COUNT:
            raise ValueError(
                f"Metadata line needs {METADATA_FIELD_COUNT} fields, got {len(fields)}: {line!r}"
            )
        name, type_name, pk, not_null, unique = fields
        try:
            column_type = parse_column_type(type_name, name)
        except ValidationError as exc:
            raise ValueError(exc.message) from exc
        return cls(
            name=name,
            type=column_type,
            is_primary_key=text_to_flag(pk),
            is_not_null=text_to_flag(not_null),
            is_unique=text_to_flag(unique),
        )


@dataclass(frozen=True)
class TableSchema:
    """Ordered, immutable column list of a table.

    Behaves as a read-only sequence of Column.
    """

    table_name: str
    columns: tuple[Column, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.columns, tuple):
            object.__setattr__(self, "columns", tuple(self.columns))

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self) -> Iterator[Column]:
        return iter(self.columns)

    def __getitem__(self, index: int) -> Column:
        return self.columns[index]

    @property
    def column_names(self) -> list[str]:
        """Column names in declaration order."""
        return [column.name for column in self.columns]

    @property
    def primary_key(self) -> Column | None:
        """The primary-key column, if the table has one."""
        for column in self.columns:
            if column.is_primary_key:
                return column
        return None

    def index_of(self, column_name: str) -> int | None:
        """0-based position of a column, matched case-insensitively."""
        wanted = column_name.lower()
        for i, column in enumerate(self.columns):
            if column.name.lower() == wanted:
                return i
        return None

    def has_column(self, column_name: str) -> bool:
        """Case-insensitive membership test."""
        return self.index_of(column_name) is not None

    @classmethod
    def of(cls, table_name: str, columns: Sequence[Column]) -> TableSchema:
        """Build a schema from any column sequence."""
        return cls(table_name=table_name, columns=tuple(columns))
