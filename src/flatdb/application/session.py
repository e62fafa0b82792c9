"""Session context: the database a caller is working in.

The core keeps no ambient "current database". DatabaseManager hands out a
SessionContext when a database is selected or created, and the caller
passes it into every TableManager operation.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SessionContext:
    """The selected database."""

    databases_root: Path
    database: str

    @property
    def database_path(self) -> Path:
        """Directory of the selected database."""
        return Path(self.databases_root) / self.database

    @property
    def lock_key(self) -> str:
        """Stable key naming this database in the lock table."""
        return os.path.abspath(self.database_path)
