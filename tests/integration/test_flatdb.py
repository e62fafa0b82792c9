"""Integration tests for the FlatDB engine."""

from __future__ import annotations

import threading

import pytest
import structlog
from prometheus_client import CollectorRegistry

from flatdb import Column, FlatDB, SelectColumn, SelectWhere, __version__
from flatdb.domain.errors import ValidationError
from flatdb.infrastructure.config import Config
from flatdb.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def db(test_config: Config):
    """A started engine on a private metrics registry."""
    metrics = MetricsRegistry(registry=CollectorRegistry())
    with FlatDB(config=test_config, metrics=metrics) as engine:
        yield engine


@pytest.mark.integration
class TestFlatDB:
    """End-to-end scenarios through the engine."""

    def test_start_creates_root(self, db: FlatDB) -> None:
        """Starting the engine creates the databases root."""
        assert db.is_started
        assert db.config.storage.databases_root.is_dir()

    def test_start_sweeps_temp_artifacts(self, test_config: Config) -> None:
        """Temp artifacts left by a crashed process are gone after start."""
        root = test_config.storage.databases_root
        (root / "shop").mkdir(parents=True)
        (root / "shop" / "users").write_text("id\n1\n")
        (root / "shop" / ".temp_users_z9x8").write_text("id\n1\n2\n")
        (root / ".temp_archive_m4n5").mkdir()

        metrics = MetricsRegistry(registry=CollectorRegistry())
        with FlatDB(config=test_config, metrics=metrics):
            assert sorted(p.name for p in root.iterdir()) == ["shop"]
            assert [p.name for p in (root / "shop").iterdir()] == ["users"]

    def test_start_twice(self, db: FlatDB) -> None:
        """Starting an already started engine is an error."""
        with pytest.raises(RuntimeError):
            db.start()

    def test_users_example(self, db: FlatDB) -> None:
        """Insert, conflict, delete and rejected update on the users table."""
        session = db.databases.create_database("shop").unwrap()
        tables = db.tables
        assert tables.create_table(session, "users", [
            Column("id", "int", is_primary_key=True),
            Column("name", "string"),
            Column("active", "boolean"),
        ]).success

        def row_count() -> int:
            info = {t.name: t.row_count for t in tables.list_tables(session).payload}
            return info["users"]

        assert tables.insert_row(session, "users", ["1", "alice", "true"]).success
        assert row_count() == 1

        conflict = tables.insert_row(session, "users", ["1", "bob", "false"])
        assert not conflict.success
        assert conflict.error.rule == "primary_key"
        assert row_count() == 1

        assert tables.insert_row(session, "users", ["2", "bob", "false"]).success
        assert row_count() == 2

        assert tables.delete_row(session, "users", 1).success
        assert tables.select(session, "users").payload.rows == [["2", "bob", "false"]]
        assert row_count() == 1

        update = tables.update_cell(session, "users", 1, 3, "maybe")
        assert isinstance(update.error, ValidationError)
        assert update.error.rule == "type"
        assert tables.select(session, "users").payload.rows == [["2", "bob", "false"]]

    def test_artifacts_on_disk(self, db: FlatDB) -> None:
        """The on-disk format is the pipe-delimited header and rows."""
        session = db.databases.create_database("shop").unwrap()
        db.tables.create_table(session, "items", [
            Column("sku", "varchar", is_primary_key=True),
            Column("qty", "int", is_not_null=True),
            Column("note", "string"),
        ])
        db.tables.insert_rows(session, "items", [["A1", "3", ""], ["B2", "0", "fragile"]])

        assert (session.database_path / "items").read_text() == (
            "sku|qty|note\nA1|3|null\nB2|0|fragile\n"
        )
        assert (session.database_path / ".items").read_text() == (
            "Column_Name|Column_Type|Primary_Key|Not_Null|Unique\n"
            "sku|varchar|yes|yes|yes\n"
            "qty|int|no|yes|no\n"
            "note|string|no|no|no\n"
        )

    def test_queries_after_reopen(self, test_config: Config) -> None:
        """A second engine on the same root sees committed data."""
        with FlatDB(test_config, MetricsRegistry(CollectorRegistry())) as first:
            session = first.databases.create_database("shop").unwrap()
            first.tables.create_table(session, "users", [Column("id", "int", is_primary_key=True)])
            first.tables.insert_rows(session, "users", [["1"], ["2"]])

        with FlatDB(test_config, MetricsRegistry(CollectorRegistry())) as second:
            session = second.databases.select_database("shop").unwrap()
            assert second.tables.select(session, "users", SelectColumn(1)).payload.rows == [
                ["1"], ["2"],
            ]
            assert second.tables.select(session, "users", SelectWhere("ID", "2")).payload.rows == [
                ["2"],
            ]

    def test_drop_database_then_table_operations_fail(self, db: FlatDB) -> None:
        """A session on a dropped database no longer resolves tables."""
        session = db.databases.create_database("shop").unwrap()
        db.tables.create_table(session, "users", [Column("id", "int")])

        assert db.databases.drop_database("shop").payload == 1
        assert db.databases.list_databases().payload == []
        assert not db.tables.insert_row(session, "users", ["1"]).success

    def test_concurrent_inserts_keep_primary_key_unique(self, db: FlatDB) -> None:
        """Writers racing on the same key commit exactly one row."""
        session = db.databases.create_database("shop").unwrap()
        db.tables.create_table(session, "users", [Column("id", "int", is_primary_key=True)])
        results = []

        def insert() -> None:
            results.append(db.tables.insert_row(session, "users", ["7"]))

        threads = [threading.Thread(target=insert) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sum(1 for r in results if r.success) == 1
        assert len(db.tables.select(session, "users").payload) == 1

    def test_lock_waits_are_observed(self, db: FlatDB) -> None:
        """Every lock grant is recorded in the lock-wait histogram."""
        session = db.databases.create_database("shop").unwrap()
        db.tables.create_table(session, "users", [Column("id", "int")])

        count = db.metrics.registry.get_sample_value(
            "flatdb_lock_wait_seconds_count", {"mode": "exclusive"}
        )
        assert count is not None and count >= 2

    def test_from_config_sets_up_observability(self, test_config: Config) -> None:
        """from_config configures logging, tracing and build info before wiring the engine."""
        metrics = MetricsRegistry(registry=CollectorRegistry())
        try:
            with FlatDB.from_config(test_config, metrics=metrics) as engine:
                session = engine.databases.create_database("shop").unwrap()
                assert session.database_path.is_dir()
        finally:
            structlog.reset_defaults()

        assert metrics.registry.get_sample_value("flatdb_info", {"version": __version__}) == 1.0
