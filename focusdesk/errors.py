"""Storage error taxonomy.

Every failure raised out of the service layer is a ``StorageError``; the
command boundary and the HTTP routes flatten it to ``str(e)``.
"""
from __future__ import annotations


class StorageError(Exception):
    """Base class for everything the persistence layer raises."""


class ConnectionAcquisitionError(StorageError):
    """Pool exhausted or database file unreachable."""


class QueryExecutionError(StorageError):
    """Statement failed: malformed SQL, constraint violation, locked file."""


class RowMappingError(StorageError):
    """A stored value does not parse to its expected type."""


class NotFoundError(StorageError):
    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity}_not_found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(StorageError):
    """Caller input rejected before anything is executed."""
