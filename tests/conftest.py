"""Shared test fixtures and helpers."""

from typing import Optional

import pytest

from fieldservice.lifecycle import BookingLifecycle
from fieldservice.schemas.booking_schema import TECHNICIAN_BOUND_STATUSES, Booking
from fieldservice.services import build_desk
from fieldservice.store import InMemoryStore


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def desk(store):
    return build_desk(store, seed=False)


@pytest.fixture
def lifecycle():
    return BookingLifecycle(currency_symbol="₹")


@pytest.fixture
def technician(desk):
    return desk.bookings.create_technician(
        {"name": "Rahul Kumar", "phone": "9871000001", "skills": "Split AC, Installation"}
    )


@pytest.fixture
def booking(desk):
    return desk.bookings.create_booking(booking_fields())


def booking_fields(
    name: str = "Asha Rao",
    phone: str = "9876500000",
    address: str = "12 MG Road",
    service_type: str = "Gas Filling",
    notes: Optional[str] = None,
    **extra,
) -> dict:
    """Helper to build a customer booking form with sensible defaults."""
    fields = {
        "name": name,
        "phone": phone,
        "address": address,
        "service_type": service_type,
        "date": "2025-06-01",
        "time": "10:00",
        **extra,
    }
    if notes is not None:
        fields["notes"] = notes
    return fields


def assert_invariants(booking: Booking) -> None:
    """Check the technician/amount/history rules every stored booking must satisfy."""
    bound = booking.status in TECHNICIAN_BOUND_STATUSES
    assert (booking.technician_id is not None) == bound, booking
    assert (booking.technician_name is not None) == bound, booking
    if booking.amount is not None:
        assert booking.status.value == "Completed", booking
    assert booking.history, booking
    assert booking.history[0].text == "Booking requested by customer"
