"""Validator - pure checks for identifiers, value types and constraints.

Every check returns None when the input is acceptable and raises
ValidationError otherwise. Nothing here touches the filesystem, so the
checks can run freely during the validation phase of an operation.

Rules:
    Identifiers: 1-64 characters, first character an ASCII letter, the
        rest ASCII letters, digits or underscores, not a reserved word
        (case-insensitive).
    Safe names: no "..", "/" or "\\".
    Values: "null" is always type-valid; int is -?[0-9]+; boolean is one
        of true, false, 0, 1; the other types accept any text.
        Every value must be encodable as UTF-8.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Sequence

from flatdb.domain.errors import ValidationError
from flatdb.domain.value_objects import (
    MAX_IDENTIFIER_LENGTH,
    MIN_IDENTIFIER_LENGTH,
    NULL,
    RESERVED_WORDS,
    TYPE_NAMES,
    UNSAFE_NAME_FRAGMENTS,
    ColumnType,
    IdentifierKind,
)

if TYPE_CHECKING:
    from flatdb.domain.entities import Column


_LEADING_LETTER = re.compile(r"[A-Za-z]")
_IDENTIFIER = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
_INTEGER = re.compile(r"-?[0-9]+")
BOOLEAN_LITERALS = frozenset({"true", "false", "0", "1"})


def validate_identifier(name: str, kind: IdentifierKind) -> None:
    """Check a database, table or column name.

    Args:
        name: The candidate name.
        kind: What the name identifies (used in the message).

    Raises:
        ValidationError: With rule "identifier" or "reserved_word".
    """
    label = kind.label
    if not name:
        raise ValidationError(f"{label} name cannot be empty", field=name, rule="identifier")

    if not MIN_IDENTIFIER_LENGTH <= len(name) <= MAX_IDENTIFIER_LENGTH:
        raise ValidationError(
            f"{label} name must be between {MIN_IDENTIFIER_LENGTH} and "
            f"{MAX_IDENTIFIER_LENGTH} characters",
            field=name,
            rule="identifier",
        )

    if not _LEADING_LETTER.match(name):
        raise ValidationError(
            f"{label} name must start with a letter", field=name, rule="identifier"
        )

    if not _IDENTIFIER.fullmatch(name):
        raise ValidationError(
            f"{label} name can only contain letters, numbers, and underscores",
            field=name,
            rule="identifier",
        )

    if name.lower() in RESERVED_WORDS:
        raise ValidationError(
            f"'{name}' is a reserved keyword and cannot be used",
            field=name,
            rule="reserved_word",
        )


def validate_safe_name(name: str) -> None:
    """Reject names that would escape their parent directory.

    Raises:
        ValidationError: With rule "path_traversal".
    """
    if any(fragment in name for fragment in UNSAFE_NAME_FRAGMENTS):
        raise ValidationError(
            f"Invalid name {name!r}: path traversal detected",
            field=name,
            rule="path_traversal",
        )


def validate_type(value: str, column_type: ColumnType, column_name: str | None = None) -> None:
    """Check a cell value against its column's declared type.

    The NULL sentinel is always accepted here; NOT NULL is checked
    separately by validate_not_null.

    Raises:
        ValidationError: With rule "type".
    """
    if value == NULL:
        return

    if column_type is ColumnType.INT:
        if not _INTEGER.fullmatch(value):
            raise ValidationError(
                f"'{column_name}' must be an integer, got {value!r}",
                field=column_name,
                rule="type",
            )
    elif column_type is ColumnType.BOOLEAN:
        if value not in BOOLEAN_LITERALS:
            raise ValidationError(
                f"'{column_name}' must be true/false/0/1, got {value!r}",
                field=column_name,
                rule="type",
            )


def validate_not_null(value: str, column_name: str | None = None) -> None:
    """Check that a required column received a value.

    Raises:
        ValidationError: With rule "not_null" if value is empty or "null".
    """
    if not value or value == NULL:
        raise ValidationError(
            f"'{column_name}' cannot be NULL", field=column_name, rule="not_null"
        )


def validate_encodable(value: str, column_name: str | None = None) -> None:
    """Check that a value can be written to an artifact as UTF-8.

    Raises:
        ValidationError: With rule "encoding" for lone surrogates and other
            unencodable text.
    """
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ValidationError(
            f"'{column_name}' holds text that cannot be stored as UTF-8: {exc.reason}",
            field=column_name,
            rule="encoding",
        ) from exc


def parse_column_type(name: str, column_name: str | None = None) -> ColumnType:
    """Map a type name to a ColumnType.

    Raises:
        ValidationError: With rule "type" for unknown names.
    """
    if name.strip().lower() not in TYPE_NAMES:
        raise ValidationError(
            f"Invalid data type: {name!r}", field=column_name, rule="type"
        )
    return ColumnType.from_name(name)


def validate_column_set(columns: Sequence[Column]) -> None:
    """Check a table's column list before it is created.

    Raises:
        ValidationError: If the list is empty, a name is invalid or repeated
            (case-insensitive), more than one column is the primary key, or
            the primary key is boolean.
    """
    if not columns:
        raise ValidationError("A table needs at least one column", rule="column_count")

    seen: set[str] = set()
    primary_keys: list[Column] = []
    for column in columns:
        validate_identifier(column.name, IdentifierKind.COLUMN)
        key = column.name.lower()
        if key in seen:
            raise ValidationError(
                f"Column '{column.name}' already exists",
                field=column.name,
                rule="duplicate_column",
            )
        seen.add(key)
        if column.is_primary_key:
            primary_keys.append(column)

    if len(primary_keys) > 1:
        raise ValidationError(
            "A table can have at most one PRIMARY KEY",
            field=primary_keys[1].name,
            rule="primary_key",
        )

    if primary_keys and primary_keys[0].type.is_boolean():
        raise ValidationError(
            f"Boolean column '{primary_keys[0].name}' cannot be the PRIMARY KEY",
            field=primary_keys[0].name,
            rule="primary_key",
        )
