"""
Booking and technician registration plus the status operations.

Customer submissions, admin confirmation and the technician's progress
updates all enter here. Every status change is delegated to the
lifecycle engine and committed through one atomic store update.
"""

from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError

from fieldservice.config import settings
from fieldservice.errors import InvalidTransitionError, NotFound, ValidationError
from fieldservice.lifecycle import CREATED_TEXT, BookingAction, BookingLifecycle
from fieldservice.logging_context import get_request_logger
from fieldservice.schemas.booking_schema import (
    Booking,
    BookingRequest,
    BookingStatus,
    HistoryEntry,
)
from fieldservice.schemas.customer_schema import Customer
from fieldservice.schemas.technician_schema import Technician, TechnicianRequest
from fieldservice.services.catalog import SEED_TECHNICIANS, match_service_type
from fieldservice.store.base import EntityStore
from fieldservice.utils import new_id, normalize_phone

logger = get_request_logger(__name__)

# Statuses a technician may set directly; the others need their own operation.
_STATUS_ACTIONS: dict[BookingStatus, BookingAction] = {
    BookingStatus.CONFIRMED: BookingAction.CONFIRM,
    BookingStatus.ON_THE_WAY: BookingAction.ON_THE_WAY,
    BookingStatus.STARTED: BookingAction.START,
    BookingStatus.CANCELLED: BookingAction.CANCEL,
}


def _parse_form(model: type[BaseModel], fields: Union[BaseModel, Mapping[str, Any]]) -> Any:
    """Coerce raw form input into ``model``, reporting bad fields as ValidationError."""
    if isinstance(fields, model):
        return fields
    data = fields.model_dump() if isinstance(fields, BaseModel) else dict(fields)
    try:
        return model(**data)
    except PydanticValidationError as exc:
        bad = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
        raise ValidationError(f"Invalid value for: {', '.join(bad)}.", bad) from None


def _require(pairs: list[tuple[str, str]]) -> None:
    missing = [name for name, value in pairs if not value or not value.strip()]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}.", missing)


class BookingService:
    """Entry point for creating, reading and progressing bookings."""

    def __init__(self, store: EntityStore, lifecycle: Optional[BookingLifecycle] = None) -> None:
        self.store = store
        self.lifecycle = lifecycle or BookingLifecycle(settings.business.currency_symbol)

    # ------------------------------------------------------------------ #
    # Creation
    # ------------------------------------------------------------------ #

    def create_booking(self, fields: Union[BookingRequest, Mapping[str, Any]]) -> Booking:
        """Validate a customer submission and store it as a Requested booking."""
        request: BookingRequest = _parse_form(BookingRequest, fields)
        _require([("name", request.name), ("phone", request.phone), ("address", request.address)])

        service_type = match_service_type(request.service_type)
        if service_type is None:
            raise ValidationError(
                f"Unknown service type: {request.service_type!r}.", ["service_type"]
            )

        booking = Booking(
            id=new_id("bk"),
            name=request.name.strip(),
            phone=request.phone.strip(),
            address=request.address.strip(),
            service_type=service_type,
            date=request.date,
            time=request.time,
            notes=request.notes,
            pay_mode=request.pay_mode,
        )
        booking.history.append(HistoryEntry(at=booking.created_at, text=CREATED_TEXT))

        customer = Customer(
            name=booking.name,
            phone=normalize_phone(booking.phone),
            address=booking.address,
            booking_id=booking.id,
        )
        stored = self.store.add_booking(booking, customer)
        logger.info(
            "Booking created: %s for %s (%s) on %s at %s",
            stored.id, stored.name, stored.service_type, stored.date, stored.time,
        )
        return stored

    def create_technician(self, fields: Union[TechnicianRequest, Mapping[str, Any]]) -> Technician:
        """Register a technician; skills may be given comma-separated."""
        request: TechnicianRequest = _parse_form(TechnicianRequest, fields)
        _require([("name", request.name), ("phone", request.phone)])

        technician = Technician(
            id=new_id("tech"),
            name=request.name.strip(),
            phone=request.phone.strip(),
            skills=request.skills,
        )
        stored = self.store.add_technician(technician)
        logger.info("Technician registered: %s (%s)", stored.name, stored.id)
        return stored

    def seed_technicians(self) -> list[Technician]:
        """Install the default roster when no technicians exist yet."""
        if self.store.list_technicians():
            return []
        seeded = [
            self.create_technician({**tech, "skills": ", ".join(tech["skills"])})
            for tech in SEED_TECHNICIANS
        ]
        logger.info("Seeded %d default technicians", len(seeded))
        return seeded

    def set_technician_active(self, technician_id: str, active: bool) -> Technician:
        """Activate or deactivate a technician. Technicians are never deleted."""
        updated = self.store.update_technician(
            technician_id, lambda t: t.model_copy(update={"active": active})
        )
        logger.info("Technician %s %s", technician_id, "activated" if active else "deactivated")
        return updated

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.store.get_booking(booking_id)
        if booking is None:
            raise NotFound("Booking", booking_id)
        return booking

    def get_technician(self, technician_id: str) -> Technician:
        technician = self.store.get_technician(technician_id)
        if technician is None:
            raise NotFound("Technician", technician_id)
        return technician

    def list_bookings(self) -> list[Booking]:
        """All bookings, newest first."""
        return self.store.list_bookings()

    def list_technicians(self) -> list[Technician]:
        """All technicians, newest first."""
        return self.store.list_technicians()

    # ------------------------------------------------------------------ #
    # Status changes
    # ------------------------------------------------------------------ #

    def transition(
        self,
        booking_id: str,
        action: BookingAction,
        expected_version: Optional[int] = None,
        **kwargs: Any,
    ) -> Booking:
        """Apply one lifecycle action atomically; failures leave the booking unchanged."""
        try:
            updated = self.store.update_booking(
                booking_id,
                lambda b: self.lifecycle.apply(b, action, **kwargs),
                expected_version=expected_version,
            )
        except (InvalidTransitionError, ValidationError) as exc:
            logger.warning("Rejected %s on booking %s: %s", action.value, booking_id, exc)
            raise
        logger.info("Booking %s is now %s", booking_id, updated.status.value)
        return updated

    def confirm(self, booking_id: str) -> Booking:
        return self.transition(booking_id, BookingAction.CONFIRM)

    def mark_on_the_way(self, booking_id: str) -> Booking:
        return self.transition(booking_id, BookingAction.ON_THE_WAY)

    def start(self, booking_id: str) -> Booking:
        return self.transition(booking_id, BookingAction.START)

    def complete(self, booking_id: str, amount: Any) -> Booking:
        """Finish a started job with its final bill."""
        return self.transition(booking_id, BookingAction.COMPLETE, amount=amount)

    def cancel(self, booking_id: str, reason: Optional[str] = None) -> Booking:
        return self.transition(booking_id, BookingAction.CANCEL, reason=reason)

    def update_status(self, booking_id: str, new_status: Union[BookingStatus, str]) -> Booking:
        """
        Move a booking to ``new_status`` through the state machine.

        ``Assigned`` and ``Completed`` carry extra data, so they must go
        through ``assign`` and ``complete`` instead.
        """
        try:
            status = BookingStatus(new_status)
        except ValueError:
            raise ValidationError(f"Unknown status: {new_status!r}.", ["status"]) from None

        action = _STATUS_ACTIONS.get(status)
        if action is None:
            if status == BookingStatus.REQUESTED:
                raise InvalidTransitionError("No transition leads back to 'Requested'.")
            operation = "assign" if status == BookingStatus.ASSIGNED else "complete"
            raise InvalidTransitionError(
                f"Status '{status.value}' can only be set by the {operation} operation."
            )
        return self.transition(booking_id, action)
