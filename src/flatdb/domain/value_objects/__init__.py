"""Value objects for the flatdb domain.

Exports:
    Column types:
        - ColumnType: Declared column type (int, string, boolean, ...)
        - NULL: The reserved "no value" sentinel
        - DELIMITER, METADATA_HEADER: Artifact format constants
    Identifiers:
        - IdentifierKind: database / table / column
        - RESERVED_WORDS: Keywords that may not be used as names
    Locking:
        - LockMode: SHARED / EXCLUSIVE table locks
"""

from flatdb.domain.value_objects.column_types import (
    DELIMITER,
    METADATA_HEADER,
    NO,
    NULL,
    TYPE_NAMES,
    YES,
    ColumnType,
    flag_to_text,
    text_to_flag,
)
from flatdb.domain.value_objects.identifiers import (
    MAX_IDENTIFIER_LENGTH,
    MIN_IDENTIFIER_LENGTH,
    RESERVED_WORDS,
    UNSAFE_NAME_FRAGMENTS,
    IdentifierKind,
)
from flatdb.domain.value_objects.lock_mode import LockMode

__all__ = [
    # Column types
    "ColumnType",
    "NULL",
    "DELIMITER",
    "METADATA_HEADER",
    "TYPE_NAMES",
    "YES",
    "NO",
    "flag_to_text",
    "text_to_flag",
    # Identifiers
    "IdentifierKind",
    "RESERVED_WORDS",
    "UNSAFE_NAME_FRAGMENTS",
    "MIN_IDENTIFIER_LENGTH",
    "MAX_IDENTIFIER_LENGTH",
    # Locking
    "LockMode",
]
