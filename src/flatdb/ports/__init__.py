"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts. flatdb has
outbound ports only: the storage the table engine depends on. Adapters
implement these ports with concrete functionality.
"""

from flatdb.ports.outbound import RecordStore, SchemaStore

__all__ = [
    "SchemaStore",
    "RecordStore",
]
