"""Error taxonomy for the visitor-record layer."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gate_entry.services.validation import ValidationResult


class VisitorError(Exception):
    """Base class for visitor-layer errors."""


class ValidationError(VisitorError):
    """A required visitor field is missing or malformed."""

    def __init__(self, result: ValidationResult) -> None:
        self.result = result
        message = "; ".join(result.errors) or "Visitor record is invalid"
        super().__init__(message)


class InvalidPhotoFormat(VisitorError):
    """The photo payload is not an embedded-image data string."""


class PayloadTooLarge(VisitorError):
    """Photo payload above the advisory size ceiling.

    Reported as a warning value by the photo guard; it is never raised there.
    """

    def __init__(self, length: int, limit: int) -> None:
        self.length = length
        self.limit = limit
        super().__init__(
            f"Photo payload is {length} characters, above the {limit} character limit"
        )


class MappingError(VisitorError):
    """Input to the field mapper is not a flat key-value record."""


class RepositoryFailure(Enum):
    """Reason attached to a repository error."""

    SCHEMA_MISMATCH = "schema_mismatch"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    CONSTRAINT_VIOLATION = "constraint_violation"
    CONNECTIVITY = "connectivity"
    UNKNOWN = "unknown"


class RepositoryError(VisitorError):
    """Opaque wrapper around a persistence backend failure."""

    def __init__(
        self, message: str, reason: RepositoryFailure = RepositoryFailure.UNKNOWN
    ) -> None:
        self.reason = reason
        super().__init__(message)


class SchemaMismatchError(RepositoryError):
    """The backend table is missing a column the application writes."""

    def __init__(self, message: str) -> None:
        super().__init__(message, RepositoryFailure.SCHEMA_MISMATCH)


class VisitorNotFound(VisitorError):
    """No visitor exists for the requested id."""

    def __init__(self, visitor_id: str) -> None:
        self.visitor_id = visitor_id
        super().__init__(f"Visitor {visitor_id} not found")


class InvalidTransition(VisitorError):
    """The requested status change is not allowed from the current status."""

    def __init__(self, visitor_id: str, current: str, action: str) -> None:
        self.visitor_id = visitor_id
        self.current = current
        self.action = action
        super().__init__(f"Cannot {action} visitor {visitor_id} in status {current}")
