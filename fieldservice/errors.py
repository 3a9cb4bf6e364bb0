"""Error taxonomy for booking store operations.

Every failure is reported synchronously to the caller. None of them is
transient, so callers never retry automatically; a failed operation
leaves all entities unchanged.
"""

from typing import Optional


class BookingStoreError(Exception):
    """Base class for all domain errors raised by the booking store."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(BookingStoreError):
    """Raised when a required field is missing or a value is malformed."""

    kind = "validation_error"

    def __init__(self, message: str, fields: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.fields = list(fields or [])


class NotFound(BookingStoreError):
    """Raised when a booking or technician id does not resolve."""

    kind = "not_found"

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} '{entity_id}' not found.")
        self.entity = entity
        self.entity_id = entity_id


class InvalidTransitionError(BookingStoreError):
    """Raised when a status change is not allowed from the current status."""

    kind = "invalid_transition"


class InactiveTechnicianError(BookingStoreError):
    """Raised when assigning a booking to a deactivated technician."""

    kind = "inactive_technician"


class AlreadyAssignedError(BookingStoreError):
    """Raised when assigning a booking that already has a technician."""

    kind = "already_assigned"


class ConcurrentUpdateError(BookingStoreError):
    """Raised when a booking changed between read and write."""

    kind = "concurrent_update"
