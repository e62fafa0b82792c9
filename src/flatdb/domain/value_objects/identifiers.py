"""Identifier rules shared by databases, tables and columns."""

from __future__ import annotations

from enum import Enum


MIN_IDENTIFIER_LENGTH = 1
MAX_IDENTIFIER_LENGTH = 64

RESERVED_WORDS: frozenset[str] = frozenset({
    "select", "from", "where", "insert", "update", "delete", "drop", "create",
    "table", "database", "index", "view", "trigger", "procedure", "function",
    "alter", "add", "column", "constraint", "primary", "foreign", "key",
    "null", "not", "unique", "default", "check", "references", "cascade",
    "int", "integer", "varchar", "char", "text", "date", "time", "timestamp",
    "boolean", "bool", "float", "double", "decimal", "numeric",
})
"""SQL-style keywords that may not be used as names (compared lower-cased)."""

UNSAFE_NAME_FRAGMENTS = ("..", "/", "\\")
"""Substrings that would let a name escape its directory."""


class IdentifierKind(Enum):
    """What an identifier names. Used to build error messages."""

    DATABASE = "database"
    TABLE = "table"
    COLUMN = "column"

    @property
    def label(self) -> str:
        """Capitalized name for messages."""
        return self.value.capitalize()
