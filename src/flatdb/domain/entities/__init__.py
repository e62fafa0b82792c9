"""Domain entities for flatdb.

Exports:
    Schema:
        - Column: Typed, constrained column definition
        - TableSchema: Ordered column list of a table

    Data:
        - TableData: Header plus rows of a data artifact
        - Row: A list of cell strings
        - encode_row, decode_row: Line codec

    Select modes:
        - SelectAll, SelectColumn, SelectWhere
"""

from flatdb.domain.entities.column import Column, TableSchema
from flatdb.domain.entities.select_mode import (
    SelectAll,
    SelectColumn,
    SelectMode,
    SelectWhere,
)
from flatdb.domain.entities.table_data import Row, TableData, decode_row, encode_row

__all__ = [
    # Schema
    "Column",
    "TableSchema",
    # Data
    "Row",
    "TableData",
    "encode_row",
    "decode_row",
    # Select modes
    "SelectMode",
    "SelectAll",
    "SelectColumn",
    "SelectWhere",
]
