"""Outbound adapters - implementations of outbound ports.

These adapters store tables as plain text artifacts inside a database
directory.
"""

from flatdb.adapters.outbound.atomic_file import atomic_write_lines, sweep_temp_artifacts
from flatdb.adapters.outbound.file_record_store import FileRecordStore
from flatdb.adapters.outbound.file_schema_store import FileSchemaStore
from flatdb.adapters.outbound.table_layout import TableLayout

__all__ = [
    "TableLayout",
    "FileSchemaStore",
    "FileRecordStore",
    "atomic_write_lines",
    "sweep_temp_artifacts",
]
