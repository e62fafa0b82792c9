"""Pytest configuration and fixtures for flatdb tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from flatdb.application import DatabaseManager, SessionContext, TableManager
from flatdb.domain.entities import Column
from flatdb.domain.services import TableLockManager
from flatdb.infrastructure.config import Config, LockConfig, StorageConfig
from flatdb.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration rooted in a temporary directory."""
    return Config(
        storage=StorageConfig(
            databases_root=temp_dir / "databases",
            fsync=False,  # Faster for tests
        ),
        locks=LockConfig(timeout_seconds=2.0),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def lock_manager(test_config: Config) -> TableLockManager:
    """Provide a lock table shared by both managers."""
    return TableLockManager(timeout_seconds=test_config.locks.timeout_seconds)


@pytest.fixture
def database_manager(
    test_config: Config,
    lock_manager: TableLockManager,
    metrics_registry: MetricsRegistry,
) -> DatabaseManager:
    """Provide a database manager with its root created."""
    manager = DatabaseManager(test_config, lock_manager, metrics_registry)
    manager.ensure_root()
    return manager


@pytest.fixture
def table_manager(
    test_config: Config,
    lock_manager: TableLockManager,
    metrics_registry: MetricsRegistry,
) -> TableManager:
    """Provide a table manager sharing the database manager's locks."""
    return TableManager(test_config, lock_manager, metrics_registry)


@pytest.fixture
def session(database_manager: DatabaseManager) -> SessionContext:
    """Provide a session on a freshly created database named 'shop'."""
    result = database_manager.create_database("shop")
    assert result.success, result.message
    return result.payload


@pytest.fixture
def users_columns() -> list[Column]:
    """Columns of the users table: id(int, PK), name(string), active(boolean)."""
    return [
        Column("id", "int", is_primary_key=True),
        Column("name", "string"),
        Column("active", "boolean"),
    ]


@pytest.fixture
def users_table(
    table_manager: TableManager,
    session: SessionContext,
    users_columns: list[Column],
) -> str:
    """Provide an empty users table in the session database."""
    result = table_manager.create_table(session, "users", users_columns)
    assert result.success, result.message
    return "users"


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
