"""
flatdb - Flat-File Database Manager

A table storage engine that keeps databases as directories and tables as
pipe-delimited text files with typed, constrained columns.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"

from flatdb.application import (
    DatabaseManager,
    FlatDB,
    OperationResult,
    SessionContext,
    TableManager,
)
from flatdb.domain.entities import Column, SelectAll, SelectColumn, SelectWhere, TableSchema
from flatdb.domain.errors import (
    ConflictError,
    FlatDBError,
    LockTimeoutError,
    NotFoundError,
    StorageIOError,
    ValidationError,
)
from flatdb.domain.value_objects import ColumnType

__all__ = [
    "FlatDB",
    "DatabaseManager",
    "TableManager",
    "SessionContext",
    "OperationResult",
    "Column",
    "ColumnType",
    "TableSchema",
    "SelectAll",
    "SelectColumn",
    "SelectWhere",
    "FlatDBError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "LockTimeoutError",
    "StorageIOError",
]
