"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Outbound adapters: file-backed schema and record stores
"""

from flatdb.adapters.outbound import (
    FileRecordStore,
    FileSchemaStore,
    TableLayout,
)

__all__ = [
    # Outbound adapters
    "TableLayout",
    "FileSchemaStore",
    "FileRecordStore",
]
