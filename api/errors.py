"""Typed errors raised by the lifecycle, catalog and storage layers.

Every error carries a machine-readable ``code`` class attribute and its
context as attributes, so the HTTP layer can render them without parsing
messages:

    TimesheetError
    ├── ValidationError        VALIDATION_ERROR
    ├── NotFoundError          NOT_FOUND
    ├── InvalidStateError      INVALID_STATE
    ├── ConcurrencyError       CONCURRENT_MODIFICATION
    └── PersistenceError       PERSISTENCE_ERROR
        └── DuplicateRecordError   DUPLICATE_RECORD
"""
from __future__ import annotations


class TimesheetError(Exception):
    """Base class for all domain errors."""

    code: str = "TIMESHEET_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class ValidationError(TimesheetError):
    """Malformed or missing input. Raised before anything is written."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        return data


class NotFoundError(TimesheetError):
    """Referenced record does not exist."""

    code: str = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({"entity": self.entity, "entity_id": self.entity_id})
        return data


class InvalidStateError(TimesheetError):
    """Transition not allowed from the record's current status."""

    code: str = "INVALID_STATE"

    def __init__(self, message: str, current: str | None = None):
        self.current = current
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.current:
            data["current"] = self.current
        return data


class ConcurrencyError(TimesheetError):
    """Record was changed by someone else since it was loaded."""

    code: str = "CONCURRENT_MODIFICATION"

    def __init__(self, entity: str, entity_id: str, expected: int, actual: int):
        self.entity = entity
        self.entity_id = entity_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{entity} {entity_id} was modified concurrently "
            f"(expected version {expected}, found {actual})"
        )


class PersistenceError(TimesheetError):
    """Storage read/write failure."""

    code: str = "PERSISTENCE_ERROR"


class DuplicateRecordError(PersistenceError):
    """A unique index rejected the write."""

    code: str = "DUPLICATE_RECORD"

    def __init__(self, entity: str, message: str | None = None):
        self.entity = entity
        super().__init__(message or f"Duplicate {entity} record")
