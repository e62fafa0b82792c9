"""Naming convention for the artifacts inside one database directory.

    <database_dir>/<table>                  data artifact
    <database_dir>/<metadata_prefix><table> metadata artifact (hidden)
    <database_dir>/<temp_prefix>...         artifacts being published (hidden)

Any entry whose name starts with "." or with one of the prefixes is not a
table.
"""

from __future__ import annotations

from pathlib import Path

from flatdb.domain.errors import StorageIOError


class TableLayout:
    """Maps table names to artifact paths within a database directory."""

    def __init__(
        self,
        database_dir: str | Path,
        metadata_prefix: str = ".",
        temp_prefix: str = ".temp_",
    ) -> None:
        """Initialize the layout.

        Args:
            database_dir: The database directory.
            metadata_prefix: Prefix marking metadata artifacts.
            temp_prefix: Prefix of in-flight temporary artifacts.
        """
        self._database_dir = Path(database_dir)
        self._metadata_prefix = metadata_prefix
        self._temp_prefix = temp_prefix

    @property
    def database_dir(self) -> Path:
        """The database directory."""
        return self._database_dir

    @property
    def temp_prefix(self) -> str:
        """Prefix for temporary artifacts."""
        return self._temp_prefix

    def data_path(self, table_name: str) -> Path:
        """Path of a table's data artifact."""
        return self._database_dir / table_name

    def metadata_path(self, table_name: str) -> Path:
        """Path of a table's metadata artifact."""
        return self._database_dir / f"{self._metadata_prefix}{table_name}"

    def is_table_entry(self, entry_name: str) -> bool:
        """Check whether a directory entry name is a table's data artifact."""
        return not (
            entry_name.startswith(".")
            or entry_name.startswith(self._metadata_prefix)
            or entry_name.startswith(self._temp_prefix)
        )

    def table_names(self) -> list[str]:
        """List table names in the database directory, sorted.

        Raises:
            StorageIOError: If the directory cannot be listed.
        """
        try:
            return sorted(
                entry.name
                for entry in self._database_dir.iterdir()
                if entry.is_file() and self.is_table_entry(entry.name)
            )
        except OSError as exc:
            raise StorageIOError(
                f"Cannot list tables in {self._database_dir}: {exc}",
                field=self._database_dir.name,
                rule="io",
            ) from exc
