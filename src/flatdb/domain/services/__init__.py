"""Domain services for flatdb.

Exports:
    Validator:
        - validate_identifier, validate_safe_name: Naming rules
        - validate_type, validate_not_null, validate_encodable: Cell rules
        - parse_column_type, validate_column_set: Schema rules
    Locking:
        - TableLockManager: Reader/writer locks per database and table
"""

from flatdb.domain.services.lock_manager import TableLockManager
from flatdb.domain.services.validator import (
    parse_column_type,
    validate_column_set,
    validate_encodable,
    validate_identifier,
    validate_not_null,
    validate_safe_name,
    validate_type,
)

__all__ = [
    # Validator
    "validate_identifier",
    "validate_safe_name",
    "validate_type",
    "validate_not_null",
    "validate_encodable",
    "parse_column_type",
    "validate_column_set",
    # Locking
    "TableLockManager",
]
