"""In-process entity store guarded by a single lock."""

import logging
import threading
from typing import Optional

from fieldservice.errors import ConcurrentUpdateError, NotFound
from fieldservice.schemas.booking_schema import Booking
from fieldservice.schemas.customer_schema import Customer
from fieldservice.schemas.technician_schema import Technician
from fieldservice.store.base import BookingMutation, EntityStore, TechnicianMutation

logger = logging.getLogger(__name__)


class InMemoryStore(EntityStore):
    """
    Lists ordered newest first, plus id indexes for constant-time lookup.

    All writers take ``_lock`` so every update is serialized; two actors
    racing on the same booking cannot lose each other's changes.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._bookings: list[Booking] = []
        self._booking_index: dict[str, Booking] = {}
        self._technicians: list[Technician] = []
        self._technician_index: dict[str, Technician] = {}
        self._customers: list[Customer] = []

    # ------------------------------------------------------------------ #
    # Bookings
    # ------------------------------------------------------------------ #

    def add_booking(self, booking: Booking, customer: Optional[Customer] = None) -> Booking:
        with self._lock:
            if booking.id in self._booking_index:
                raise ValueError(f"Duplicate booking id: {booking.id}")
            touched = ["bookings"] if customer is None else ["bookings", "customers"]
            previous = self._snapshot(touched)
            stored = booking.model_copy(deep=True)
            self._bookings.insert(0, stored)
            self._booking_index[stored.id] = stored
            if customer is not None:
                self._customers.insert(0, customer.model_copy(deep=True))
            self._commit(touched, previous)
        return stored.model_copy(deep=True)

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        with self._lock:
            booking = self._booking_index.get(booking_id)
            return booking.model_copy(deep=True) if booking else None

    def list_bookings(self) -> list[Booking]:
        with self._lock:
            return [b.model_copy(deep=True) for b in self._bookings]

    def update_booking(
        self,
        booking_id: str,
        mutate: BookingMutation,
        expected_version: Optional[int] = None,
    ) -> Booking:
        with self._lock:
            current = self._booking_index.get(booking_id)
            if current is None:
                raise NotFound("Booking", booking_id)
            if expected_version is not None and current.version != expected_version:
                raise ConcurrentUpdateError(
                    f"Booking {booking_id} is at version {current.version}, "
                    f"expected {expected_version}. Re-fetch and retry."
                )

            updated = mutate(current.model_copy(deep=True))
            if updated.id != booking_id:
                raise ValueError("A booking mutation must not change the booking id")
            updated = updated.model_copy(update={"version": current.version + 1})

            previous = self._snapshot(["bookings"])
            position = self._bookings.index(current)
            self._bookings[position] = updated
            self._booking_index[booking_id] = updated
            self._commit(["bookings"], previous)
            logger.debug("Booking %s committed at version %d", booking_id, updated.version)
            return updated.model_copy(deep=True)

    # ------------------------------------------------------------------ #
    # Technicians
    # ------------------------------------------------------------------ #

    def add_technician(self, technician: Technician) -> Technician:
        with self._lock:
            if technician.id in self._technician_index:
                raise ValueError(f"Duplicate technician id: {technician.id}")
            previous = self._snapshot(["technicians"])
            stored = technician.model_copy(deep=True)
            self._technicians.insert(0, stored)
            self._technician_index[stored.id] = stored
            self._commit(["technicians"], previous)
        return stored.model_copy(deep=True)

    def get_technician(self, technician_id: str) -> Optional[Technician]:
        with self._lock:
            technician = self._technician_index.get(technician_id)
            return technician.model_copy(deep=True) if technician else None

    def list_technicians(self) -> list[Technician]:
        with self._lock:
            return [t.model_copy(deep=True) for t in self._technicians]

    def update_technician(self, technician_id: str, mutate: TechnicianMutation) -> Technician:
        with self._lock:
            current = self._technician_index.get(technician_id)
            if current is None:
                raise NotFound("Technician", technician_id)
            updated = mutate(current.model_copy(deep=True))
            previous = self._snapshot(["technicians"])
            position = self._technicians.index(current)
            self._technicians[position] = updated
            self._technician_index[technician_id] = updated
            self._commit(["technicians"], previous)
            return updated.model_copy(deep=True)

    # ------------------------------------------------------------------ #
    # Customers
    # ------------------------------------------------------------------ #

    def add_customer(self, customer: Customer) -> Customer:
        with self._lock:
            previous = self._snapshot(["customers"])
            self._customers.insert(0, customer.model_copy(deep=True))
            self._commit(["customers"], previous)
        return customer

    def list_customers(self) -> list[Customer]:
        with self._lock:
            return [c.model_copy(deep=True) for c in self._customers]

    def booking_count(self) -> int:
        with self._lock:
            return len(self._bookings)

    def _on_change(self, collection: str) -> None:
        """Hook for persistent subclasses; called with the lock held."""

    def _snapshot(self, collections: list[str]) -> dict[str, tuple[list, dict]]:
        """Shallow copies of the lists and indexes a write is about to touch."""
        state = {
            "bookings": (self._bookings, self._booking_index),
            "technicians": (self._technicians, self._technician_index),
            "customers": (self._customers, {}),
        }
        return {name: (list(state[name][0]), dict(state[name][1])) for name in collections}

    def _restore(self, previous: dict[str, tuple[list, dict]]) -> None:
        for name, (items, index) in previous.items():
            if name == "bookings":
                self._bookings, self._booking_index = items, index
            elif name == "technicians":
                self._technicians, self._technician_index = items, index
            else:
                self._customers = items

    def _commit(self, collections: list[str], previous: dict[str, tuple[list, dict]]) -> None:
        """Persist ``collections``; if any write fails, roll every one of them back."""
        written: list[str] = []
        try:
            for collection in collections:
                self._on_change(collection)
                written.append(collection)
        except Exception:
            self._restore(previous)
            for collection in written:
                try:
                    self._on_change(collection)
                except OSError:
                    logger.exception("Could not restore persisted %s after a failed write", collection)
            raise
