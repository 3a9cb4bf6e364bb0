"""
Finite state machine for the booking lifecycle.

Defines the seven booking statuses and the explicit transitions between
them. A status only changes through ``BookingLifecycle.apply``, which
returns a new Booking carrying the new status, any bound fields and
exactly one new history entry. Anything not in the table is rejected.

Usage:
    lifecycle = BookingLifecycle()
    confirmed = lifecycle.apply(booking, BookingAction.CONFIRM)
    assert confirmed.status == BookingStatus.CONFIRMED
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from fieldservice.errors import AlreadyAssignedError, InvalidTransitionError, ValidationError
from fieldservice.schemas.booking_schema import (
    TERMINAL_STATUSES,
    Booking,
    BookingStatus,
    HistoryEntry,
    utcnow,
)
from fieldservice.schemas.technician_schema import Technician

logger = logging.getLogger(__name__)

CREATED_TEXT = "Booking requested by customer"


class BookingAction(str, Enum):
    """Operations that move a booking between statuses."""
    CONFIRM = "confirm"
    ASSIGN = "assign"
    ON_THE_WAY = "on_the_way"
    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"


@dataclass(frozen=True)
class Transition:
    """A single valid status transition."""
    from_status: BookingStatus
    to_status: BookingStatus
    action: BookingAction


_NON_TERMINAL = [s for s in BookingStatus if s not in TERMINAL_STATUSES]


def parse_amount(value: Any) -> float:
    """Validate a final bill amount: numeric, finite and not negative."""
    if value is None or isinstance(value, bool):
        raise ValidationError("A final bill amount is required to complete a booking.", ["amount"])
    try:
        amount = float(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Amount must be numeric, got {value!r}.", ["amount"]) from None
    if not math.isfinite(amount):
        raise ValidationError(f"Amount must be a finite number, got {value!r}.", ["amount"])
    if amount < 0:
        raise ValidationError(f"Amount must be >= 0, got {value!r}.", ["amount"])
    return amount


def format_amount(amount: float) -> str:
    return str(int(amount)) if amount == int(amount) else f"{amount:.2f}"


class BookingLifecycle:
    """
    Deterministic state machine over booking statuses.

    ``complete`` needs an amount and ``assign`` needs a technician; both
    are validated before anything is written. ``cancel`` releases the
    technician so a cancelled booking never holds one.
    """

    TRANSITIONS: list[Transition] = [
        # --- Admin confirmation ---
        Transition(BookingStatus.REQUESTED, BookingStatus.CONFIRMED, BookingAction.CONFIRM),

        # --- Assignment ---
        *[Transition(s, BookingStatus.ASSIGNED, BookingAction.ASSIGN) for s in _NON_TERMINAL],

        # --- Technician progress ---
        Transition(BookingStatus.ASSIGNED, BookingStatus.ON_THE_WAY, BookingAction.ON_THE_WAY),
        Transition(BookingStatus.ASSIGNED, BookingStatus.STARTED, BookingAction.START),
        Transition(BookingStatus.ON_THE_WAY, BookingStatus.STARTED, BookingAction.START),
        Transition(BookingStatus.STARTED, BookingStatus.COMPLETED, BookingAction.COMPLETE),

        # --- Cancellation ---
        *[Transition(s, BookingStatus.CANCELLED, BookingAction.CANCEL) for s in _NON_TERMINAL],
    ]

    def __init__(self, currency_symbol: str = "₹") -> None:
        self.currency_symbol = currency_symbol

    def allowed_actions(self, status: BookingStatus) -> list[BookingAction]:
        """Return all actions valid from ``status``."""
        return [t.action for t in self.TRANSITIONS if t.from_status == status]

    def target_status(self, status: BookingStatus, action: BookingAction) -> BookingStatus:
        """
        Resolve where ``action`` leads from ``status``.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_status == status and t.action == action:
                return t.to_status

        valid = [a.value for a in self.allowed_actions(status)]
        raise InvalidTransitionError(
            f"Cannot {action.value} a booking in status '{status.value}'. "
            f"Valid actions: {valid}"
        )

    def is_terminal(self, status: BookingStatus) -> bool:
        return status in TERMINAL_STATUSES

    def apply(
        self,
        booking: Booking,
        action: BookingAction,
        *,
        technician: Optional[Technician] = None,
        amount: Any = None,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Booking:
        """
        Apply ``action`` to ``booking`` and return the updated copy.

        The input booking is never modified; status, bound fields and the
        new history entry land together in the returned object.

        Raises:
            InvalidTransitionError: If the action is not valid from the current status.
            AlreadyAssignedError: If assigning a booking that has a technician.
            ValidationError: If ``complete`` lacks a valid amount or ``assign`` a technician.
        """
        target = self.target_status(booking.status, action)
        changes: dict[str, Any] = {"status": target}

        if action == BookingAction.CONFIRM:
            text = "Booking confirmed"
        elif action == BookingAction.ASSIGN:
            if technician is None:
                raise ValidationError("A technician is required to assign a booking.", ["technician_id"])
            if booking.is_assigned:
                raise AlreadyAssignedError(
                    f"Booking {booking.id} is already assigned to {booking.technician_name}."
                )
            changes.update(
                technician_id=technician.id,
                technician_name=technician.name,
                technician_phone=technician.phone,
            )
            text = f"Assigned to {technician.name}"
        elif action == BookingAction.COMPLETE:
            final = parse_amount(amount)
            changes["amount"] = final
            text = f"Completed • {self.currency_symbol}{format_amount(final)}"
        elif action == BookingAction.CANCEL:
            changes.update(technician_id=None, technician_name=None, technician_phone=None)
            text = f"Booking cancelled: {reason}" if reason else "Booking cancelled"
        else:
            text = f"Status → {target.value}"

        entry = HistoryEntry(at=now or utcnow(), text=text)
        changes["history"] = [*booking.history, entry]

        logger.debug(
            "Booking %s: %s -> %s (action: %s)",
            booking.id, booking.status.value, target.value, action.value,
        )
        return booking.model_copy(update=changes)
