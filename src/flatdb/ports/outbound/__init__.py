"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for the storage that the table
engine depends on: column metadata and row data.
"""

from flatdb.ports.outbound.record_store import RecordStore
from flatdb.ports.outbound.schema_store import SchemaStore

__all__ = [
    "SchemaStore",
    "RecordStore",
]
