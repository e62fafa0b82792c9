"""Column types, the NULL sentinel and the artifact format constants."""

from __future__ import annotations

from enum import Enum


NULL = "null"
"""Reserved textual marker meaning "no value". Distinct from an empty string."""

DELIMITER = "|"
"""Cell separator in both data and metadata artifacts. Never escaped."""

METADATA_HEADER = "Column_Name|Column_Type|Primary_Key|Not_Null|Unique"
"""First line of every metadata artifact."""

YES = "yes"
NO = "no"


class ColumnType(Enum):
    """Declared type of a column.

    Only int and boolean are checked beyond presence; the remaining types
    accept any text and leave the format to the caller.
    """

    INT = "int"
    STRING = "string"
    BOOLEAN = "boolean"
    VARCHAR = "varchar"
    FLOAT = "float"
    DATE = "date"

    @classmethod
    def from_name(cls, name: str) -> ColumnType:
        """Look up a type by name, accepting ``bool`` for boolean.

        Raises:
            ValueError: If the name is not a known type.
        """
        normalized = name.strip().lower()
        if normalized == "bool":
            return cls.BOOLEAN
        return cls(normalized)

    def is_boolean(self) -> bool:
        """Check if this is the boolean type."""
        return self is ColumnType.BOOLEAN


TYPE_NAMES = frozenset({t.value for t in ColumnType} | {"bool"})
"""Every type name accepted on input."""


def flag_to_text(flag: bool) -> str:
    """Encode a constraint flag for the metadata artifact."""
    return YES if flag else NO


def text_to_flag(text: str) -> bool:
    """Decode a constraint flag from the metadata artifact."""
    return text.strip().lower() == YES
