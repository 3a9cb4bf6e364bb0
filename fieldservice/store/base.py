"""Storage contract shared by every entity store backend."""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from fieldservice.schemas.booking_schema import Booking
from fieldservice.schemas.customer_schema import Customer
from fieldservice.schemas.technician_schema import Technician

BookingMutation = Callable[[Booking], Booking]
TechnicianMutation = Callable[[Technician], Technician]

COLLECTIONS = ("bookings", "technicians", "customers")


class EntityStore(ABC):
    """
    Id-keyed collections of bookings, technicians and customers.

    Bookings and technicians iterate newest first. Reads hand out copies,
    so the only way to change a stored entity is through one of the
    ``update_*`` methods, which apply a mutation as a single atomic
    read-modify-write.
    """

    @abstractmethod
    def add_booking(self, booking: Booking, customer: Optional[Customer] = None) -> Booking:
        """Store a new booking, together with its customer record when given.

        Both are committed or neither is.
        """

    @abstractmethod
    def get_booking(self, booking_id: str) -> Optional[Booking]: ...

    @abstractmethod
    def list_bookings(self) -> list[Booking]: ...

    @abstractmethod
    def update_booking(
        self,
        booking_id: str,
        mutate: BookingMutation,
        expected_version: Optional[int] = None,
    ) -> Booking:
        """Apply ``mutate`` to the stored booking and commit the result.

        ``mutate`` receives a private copy and returns the replacement.
        If it raises, nothing is written. When ``expected_version`` is
        given and differs from the stored version, ConcurrentUpdateError
        is raised instead.
        """

    @abstractmethod
    def add_technician(self, technician: Technician) -> Technician: ...

    @abstractmethod
    def get_technician(self, technician_id: str) -> Optional[Technician]: ...

    @abstractmethod
    def list_technicians(self) -> list[Technician]: ...

    @abstractmethod
    def update_technician(self, technician_id: str, mutate: TechnicianMutation) -> Technician: ...

    @abstractmethod
    def add_customer(self, customer: Customer) -> Customer: ...

    @abstractmethod
    def list_customers(self) -> list[Customer]: ...

    def booking_count(self) -> int:
        return len(self.list_bookings())
