"""Lock modes for the advisory table locks."""

from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Lock modes.

    Compatibility Matrix:
                    SHARED    EXCLUSIVE
        SHARED        Y          N
        EXCLUSIVE     N          N

    Reads (select, list, row count) take SHARED; mutations take EXCLUSIVE.
    """

    SHARED = "shared"
    EXCLUSIVE = "exclusive"

    @staticmethod
    def is_compatible(held: LockMode, requested: LockMode) -> bool:
        """Check if a requested mode can coexist with a held mode."""
        return held is LockMode.SHARED and requested is LockMode.SHARED
