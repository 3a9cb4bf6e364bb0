"""Free-text booking search."""

from typing import Optional

from fieldservice.schemas.booking_schema import Booking
from fieldservice.store.base import EntityStore


class SearchFacade:
    """Case-insensitive substring filter over name, phone, address and service type."""

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    def search(self, query: Optional[str] = None) -> list[Booking]:
        """
        Return matching bookings in store order.

        Surrounding whitespace in ``query`` is ignored, so a blank query
        matches everything and "Filling " finds "Gas Filling". Inner
        spaces are kept and must match literally.
        """
        bookings = self.store.list_bookings()
        needle = (query or "").strip().lower()
        if not needle:
            return bookings
        return [b for b in bookings if needle in b.search_text()]
