"""Matching unassigned bookings to technicians."""

from typing import Optional

from fieldservice.errors import InactiveTechnicianError, NotFound
from fieldservice.lifecycle import BookingAction, BookingLifecycle
from fieldservice.logging_context import get_request_logger
from fieldservice.schemas.booking_schema import Booking, BookingStatus
from fieldservice.schemas.technician_schema import Technician
from fieldservice.store.base import EntityStore

logger = get_request_logger(__name__)


class AssignmentService:
    """
    Binds a technician to a booking.

    The technician's name and phone are copied onto the booking at
    assignment time and are not refreshed if the technician changes later.
    Re-assigning a booking that already has a technician is refused with
    AlreadyAssignedError; cancel it first.
    """

    def __init__(self, store: EntityStore, lifecycle: Optional[BookingLifecycle] = None) -> None:
        self.store = store
        self.lifecycle = lifecycle or BookingLifecycle()

    def assign(self, booking_id: str, technician_id: str) -> Booking:
        technician = self.store.get_technician(technician_id)
        if technician is None:
            raise NotFound("Technician", technician_id)
        if not technician.active:
            logger.warning("Refused to assign %s to inactive technician %s", booking_id, technician_id)
            raise InactiveTechnicianError(
                f"Technician {technician.name} ({technician_id}) is inactive."
            )

        booking = self.store.update_booking(
            booking_id,
            lambda b: self.lifecycle.apply(b, BookingAction.ASSIGN, technician=technician),
        )
        logger.info("Booking %s assigned to %s (%s)", booking_id, technician.name, technician_id)
        return booking

    def list_unassigned(self) -> list[Booking]:
        """Bookings without a technician that are still open, in store order."""
        return [
            b for b in self.store.list_bookings()
            if not b.is_assigned and b.status != BookingStatus.CANCELLED
        ]

    def list_candidates(self) -> list[Technician]:
        """Technicians that may be offered for assignment."""
        return [t for t in self.store.list_technicians() if t.active]

    def list_jobs_for(self, technician_id: str) -> list[Booking]:
        """Bookings currently bound to ``technician_id``, in store order."""
        if self.store.get_technician(technician_id) is None:
            raise NotFound("Technician", technician_id)
        return [b for b in self.store.list_bookings() if b.technician_id == technician_id]
