"""Booking records, audit history and the inbound booking request."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookingStatus(str, Enum):
    """All statuses a booking can be in."""
    REQUESTED = "Requested"
    CONFIRMED = "Confirmed"
    ASSIGNED = "Assigned"
    ON_THE_WAY = "On The Way"
    STARTED = "Started"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


DEFAULT_SERVICE_TYPE = "AC Repair"

TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})

# A booking carries a technician exactly while in one of these statuses.
TECHNICIAN_BOUND_STATUSES = frozenset({
    BookingStatus.ASSIGNED,
    BookingStatus.ON_THE_WAY,
    BookingStatus.STARTED,
    BookingStatus.COMPLETED,
})


class PaymentMode(str, Enum):
    CASH = "Cash"
    UPI = "UPI"
    CARD = "Card"


class HistoryEntry(BaseModel):
    """One audit line on a booking. Entries are never edited once written."""

    model_config = ConfigDict(frozen=True)

    at: datetime = Field(default_factory=utcnow)
    text: str


class Booking(BaseModel):
    """A customer's service request and its lifecycle record."""

    id: str
    created_at: datetime = Field(default_factory=utcnow)
    status: BookingStatus = BookingStatus.REQUESTED
    name: str
    phone: str
    address: str
    service_type: str
    date: str
    time: str
    notes: str = ""
    pay_mode: PaymentMode = PaymentMode.CASH
    technician_id: Optional[str] = None
    # Snapshot of the technician at assignment time; later technician
    # edits are intentionally not reflected here.
    technician_name: Optional[str] = None
    technician_phone: Optional[str] = None
    amount: Optional[float] = None
    history: list[HistoryEntry] = Field(default_factory=list)
    version: int = 1

    @property
    def is_assigned(self) -> bool:
        return self.technician_id is not None

    def search_text(self) -> str:
        """Lower-cased haystack used by the search facade."""
        return " ".join([self.name, self.phone, self.address, self.service_type]).lower()


class BookingRequest(BaseModel):
    """Customer-submitted booking form.

    Required-field checks happen in the booking service so that the
    failing fields are reported together in one ValidationError.
    """

    name: str = ""
    phone: str = ""
    address: str = ""
    service_type: str = DEFAULT_SERVICE_TYPE
    date: str = Field(default_factory=lambda: date.today().isoformat())
    time: str = "10:00"
    notes: str = ""
    pay_mode: PaymentMode = PaymentMode.CASH
