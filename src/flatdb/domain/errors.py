"""Typed error taxonomy for flatdb.

Every failure the core reports is a FlatDBError subclass carrying a
human-readable message plus two machine-readable references:

    field: the identifier or column the error is about (may be None)
    rule:  the rule that was violated, e.g. "not_null" or "primary_key"

Validation errors are always raised before any filesystem mutation.
StorageIOError wraps OSError raised while publishing or removing artifacts.
"""

from __future__ import annotations


class FlatDBError(Exception):
    """Base class for all flatdb errors."""

    kind = "error"

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        rule: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.rule = rule

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.message!r}, "
            f"field={self.field!r}, rule={self.rule!r})"
        )


class ValidationError(FlatDBError):
    """Input rejected by a naming, type or constraint rule."""

    kind = "validation"


class NotFoundError(FlatDBError):
    """A table or database does not exist."""

    kind = "not_found"


class ConflictError(FlatDBError):
    """A table or database already exists."""

    kind = "conflict"


class LockTimeoutError(FlatDBError):
    """A table lock could not be granted in time."""

    kind = "lock_timeout"


class StorageIOError(FlatDBError):
    """Filesystem failure while writing, renaming or deleting an artifact."""

    kind = "io"
