"""Application layer for flatdb.

Exports:
    Engine:
        - FlatDB: Entry point wiring the managers together
    Managers:
        - DatabaseManager: Create, select, drop and list databases
        - TableManager: Table and row operations
    Session:
        - SessionContext: The selected database
    Results:
        - OperationResult, RowOutcome, SelectResult, CellUpdate,
          TableInfo, DatabaseInfo
"""

from flatdb.application.database_manager import DatabaseManager
from flatdb.application.engine import FlatDB
from flatdb.application.results import (
    CellUpdate,
    DatabaseInfo,
    OperationResult,
    RowOutcome,
    SelectResult,
    TableInfo,
)
from flatdb.application.session import SessionContext
from flatdb.application.table_manager import TableManager

__all__ = [
    "FlatDB",
    "DatabaseManager",
    "TableManager",
    "SessionContext",
    "OperationResult",
    "RowOutcome",
    "SelectResult",
    "CellUpdate",
    "TableInfo",
    "DatabaseInfo",
]
