"""Unit tests for FileRecordStore, TableLayout and the atomic publish helpers."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from unittest import mock

import pytest

from flatdb.adapters.outbound import (
    FileRecordStore,
    TableLayout,
    atomic_write_lines,
    sweep_temp_artifacts,
)
from flatdb.domain.errors import ConflictError, NotFoundError, StorageIOError, ValidationError


@pytest.fixture
def layout(temp_dir: Path) -> TableLayout:
    """Layout for a database directory inside the temp dir."""
    database_dir = temp_dir / "shop"
    database_dir.mkdir()
    return TableLayout(database_dir)


@pytest.fixture
def store(layout: TableLayout) -> FileRecordStore:
    """Record store without fsync."""
    return FileRecordStore(layout, fsync=False)


@pytest.fixture
def users(store: FileRecordStore) -> str:
    """A users table with three rows."""
    store.create_empty("users", ["id", "name", "active"])
    store.append_row("users", ["1", "alice", "true"])
    store.append_row("users", ["2", "bob", "false"])
    store.append_row("users", ["3", "carol", "null"])
    return "users"


@pytest.mark.unit
class TestFileRecordStore:
    """Tests for FileRecordStore."""

    def test_create_empty(self, store: FileRecordStore, layout: TableLayout) -> None:
        """A new data artifact holds only the header line."""
        store.create_empty("users", ["id", "name"])

        path = layout.data_path("users")
        assert path.read_text() == "id|name\n"
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o644
        assert store.row_count("users") == 0

    def test_create_existing(self, store: FileRecordStore) -> None:
        """Creating over an existing data artifact conflicts."""
        store.create_empty("users", ["id"])

        with pytest.raises(ConflictError):
            store.create_empty("users", ["id"])

    def test_append_and_read(self, store: FileRecordStore, users: str) -> None:
        """Appended rows are read back in order."""
        data = store.read_all(users)

        assert data.header == ["id", "name", "active"]
        assert data.rows == [
            ["1", "alice", "true"],
            ["2", "bob", "false"],
            ["3", "carol", "null"],
        ]
        assert store.row_count(users) == 3

    def test_append_after_unterminated_line(
        self, store: FileRecordStore, layout: TableLayout
    ) -> None:
        """An append never merges with a last line that lacks a newline."""
        layout.data_path("users").write_text("id|name\n1|alice")

        store.append_row("users", ["2", "bob"])

        assert store.read_all("users").rows == [["1", "alice"], ["2", "bob"]]

    def test_blank_lines_ignored(self, store: FileRecordStore, layout: TableLayout) -> None:
        """Blank lines are not counted as rows."""
        layout.data_path("users").write_text("id|name\n\n1|alice\n\n")

        assert store.row_count("users") == 1

    def test_missing_header_is_corrupt(
        self, store: FileRecordStore, layout: TableLayout
    ) -> None:
        """An empty data artifact is corrupt."""
        layout.data_path("users").write_text("")

        with pytest.raises(StorageIOError) as exc_info:
            store.read_all("users")

        assert exc_info.value.rule == "corrupt"

    def test_non_utf8_artifact_is_corrupt(
        self, store: FileRecordStore, layout: TableLayout
    ) -> None:
        """Bytes that are not UTF-8 surface as a corrupt table, not a decode crash."""
        layout.data_path("users").write_bytes(b"id|name\n1|\xff\xfe\n")

        with pytest.raises(StorageIOError) as exc_info:
            store.read_all("users")

        assert exc_info.value.rule == "corrupt"

    def test_append_unencodable_row(
        self, store: FileRecordStore, layout: TableLayout, users: str
    ) -> None:
        """A row that cannot be encoded is refused and nothing is appended."""
        original = layout.data_path(users).read_bytes()

        with pytest.raises(StorageIOError) as exc_info:
            store.append_row(users, ["4", "d\udcffve", "true"])

        assert exc_info.value.rule == "encoding"
        assert layout.data_path(users).read_bytes() == original

    def test_read_missing_table(self, store: FileRecordStore) -> None:
        """Reading a missing table raises NotFoundError."""
        with pytest.raises(NotFoundError):
            store.read_all("ghosts")

        with pytest.raises(NotFoundError):
            store.append_row("ghosts", ["1"])

    def test_replace_row(self, store: FileRecordStore, users: str) -> None:
        """Replacing a row changes only that row."""
        before = store.replace_row(users, 2, ["2", "bobby", "true"])

        assert before == ["2", "bob", "false"]
        assert store.read_all(users).rows == [
            ["1", "alice", "true"],
            ["2", "bobby", "true"],
            ["3", "carol", "null"],
        ]

    def test_delete_row_shifts_later_rows(self, store: FileRecordStore, users: str) -> None:
        """Deleting row i removes it and shifts later rows up."""
        removed = store.delete_row(users, 1)

        assert removed == ["1", "alice", "true"]
        data = store.read_all(users)
        assert data.row(1) == ["2", "bob", "false"]
        assert data.row(2) == ["3", "carol", "null"]
        assert len(data) == 2

    @pytest.mark.parametrize("row_index", [0, 4, -1])
    def test_row_index_out_of_range(
        self, store: FileRecordStore, layout: TableLayout, users: str, row_index: int
    ) -> None:
        """Out-of-range rows are rejected and the artifact is untouched."""
        original = layout.data_path(users).read_bytes()

        with pytest.raises(ValidationError) as exc_info:
            store.delete_row(users, row_index)
        with pytest.raises(ValidationError):
            store.replace_row(users, row_index, ["9", "x", "true"])

        assert exc_info.value.rule == "row_index"
        assert layout.data_path(users).read_bytes() == original

    def test_column_values(self, store: FileRecordStore, users: str) -> None:
        """column_values scans one column, optionally skipping a row."""
        assert store.column_values(users, 1) == ["alice", "bob", "carol"]
        assert store.column_values(users, 0, exclude_row_index=2) == ["1", "3"]

    def test_column_values_short_rows(self, store: FileRecordStore, layout: TableLayout) -> None:
        """Short rows contribute the null sentinel."""
        layout.data_path("t").write_text("a|b\n1\n")

        assert store.column_values("t", 1) == ["null"]

    def test_drop(self, store: FileRecordStore, layout: TableLayout, users: str) -> None:
        """drop removes the data and metadata artifacts together."""
        layout.metadata_path(users).write_text("meta\n")

        store.drop(users)

        assert not layout.data_path(users).exists()
        assert not layout.metadata_path(users).exists()
        assert not store.exists(users)

    def test_drop_missing(self, store: FileRecordStore) -> None:
        """Dropping a missing table raises NotFoundError."""
        with pytest.raises(NotFoundError):
            store.drop("ghosts")


@pytest.mark.unit
class TestTableLayout:
    """Tests for TableLayout."""

    def test_paths(self, layout: TableLayout) -> None:
        """Data and metadata artifacts sit side by side."""
        assert layout.data_path("users") == layout.database_dir / "users"
        assert layout.metadata_path("users") == layout.database_dir / ".users"

    def test_table_names_skip_hidden_entries(self, layout: TableLayout) -> None:
        """Metadata, temp artifacts and directories are not tables."""
        for name in ["users", "orders", ".users", ".orders", ".temp_users_x"]:
            (layout.database_dir / name).write_text("x\n")
        (layout.database_dir / "subdir").mkdir()

        assert layout.table_names() == ["orders", "users"]

    def test_custom_metadata_prefix(self, temp_dir: Path) -> None:
        """A custom metadata prefix is honoured when naming and listing."""
        layout = TableLayout(temp_dir, metadata_prefix="_meta_")
        (temp_dir / "users").write_text("x\n")
        (temp_dir / "_meta_users").write_text("x\n")

        assert layout.metadata_path("users").name == "_meta_users"
        assert layout.table_names() == ["users"]

    def test_table_names_missing_directory(self, temp_dir: Path) -> None:
        """Listing a missing directory is a storage error."""
        with pytest.raises(StorageIOError):
            TableLayout(temp_dir / "missing").table_names()


@pytest.mark.unit
class TestAtomicWriteLines:
    """Tests for the atomic publish helper."""

    def test_replaces_target(self, temp_dir: Path) -> None:
        """The target ends up with exactly the new lines."""
        target = temp_dir / "users"
        target.write_text("old\n")

        atomic_write_lines(target, ["a", "b"], fsync=False)

        assert target.read_text() == "a\nb\n"

    def test_failed_rename_leaves_target_and_no_temp(self, temp_dir: Path) -> None:
        """A failure before the rename keeps the old artifact and cleans up."""
        target = temp_dir / "users"
        target.write_text("old\n")

        with mock.patch("os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StorageIOError) as exc_info:
                atomic_write_lines(target, ["new"], fsync=False)

        assert exc_info.value.rule == "io"
        assert target.read_text() == "old\n"
        assert [p.name for p in temp_dir.iterdir()] == ["users"]

    def test_failure_while_writing(self, temp_dir: Path) -> None:
        """An error raised mid-write still removes the temporary file."""
        target = temp_dir / "users"

        def lines():
            yield "first"
            raise RuntimeError("interrupted")

        with pytest.raises(RuntimeError):
            atomic_write_lines(target, lines(), fsync=False)

        assert list(temp_dir.iterdir()) == []

    def test_unencodable_line(self, temp_dir: Path) -> None:
        """Text that cannot be encoded is a storage error and leaves no temp file."""
        target = temp_dir / "users"
        target.write_text("old\n")

        with pytest.raises(StorageIOError) as exc_info:
            atomic_write_lines(target, ["\udc80"], fsync=False)

        assert exc_info.value.rule == "encoding"
        assert target.read_text() == "old\n"
        assert [p.name for p in temp_dir.iterdir()] == ["users"]


@pytest.mark.unit
class TestSweepTempArtifacts:
    """Tests for removing leftovers of interrupted publishes."""

    def test_removes_temp_files_and_directories(self, temp_dir: Path) -> None:
        """Entries with the temp prefix go; tables and metadata stay."""
        (temp_dir / "users").write_text("id\n")
        (temp_dir / ".users").write_text("meta\n")
        (temp_dir / ".temp_users_x1y2").write_text("id\n1\n")
        (temp_dir / ".temp_shop_ab12").mkdir()
        (temp_dir / ".temp_shop_ab12" / "orders").write_text("id\n")

        removed = sweep_temp_artifacts(temp_dir, ".temp_")

        assert [p.name for p in removed] == [".temp_shop_ab12", ".temp_users_x1y2"]
        assert sorted(p.name for p in temp_dir.iterdir()) == [".users", "users"]

    def test_nothing_to_sweep(self, temp_dir: Path) -> None:
        """A clean directory is left untouched."""
        (temp_dir / "users").write_text("id\n")

        assert sweep_temp_artifacts(temp_dir, ".temp_") == []
        assert [p.name for p in temp_dir.iterdir()] == ["users"]

    def test_missing_directory(self, temp_dir: Path) -> None:
        """Sweeping a missing directory is a storage error."""
        with pytest.raises(StorageIOError):
            sweep_temp_artifacts(temp_dir / "missing", ".temp_")
