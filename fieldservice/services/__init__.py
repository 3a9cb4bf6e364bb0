from dataclasses import dataclass
from typing import Optional

from fieldservice.config import settings
from fieldservice.lifecycle import BookingLifecycle
from fieldservice.services.assignment import AssignmentService
from fieldservice.services.bookings import BookingService
from fieldservice.services.reporting import ReportingService
from fieldservice.services.search import SearchFacade
from fieldservice.store import EntityStore, build_store

__all__ = [
    "BookingService",
    "AssignmentService",
    "SearchFacade",
    "ReportingService",
    "ServiceDesk",
    "build_desk",
]


@dataclass
class ServiceDesk:
    """All services wired to one store and one lifecycle engine."""

    store: EntityStore
    bookings: BookingService
    assignment: AssignmentService
    search: SearchFacade
    reporting: ReportingService


def build_desk(store: Optional[EntityStore] = None, seed: Optional[bool] = None) -> ServiceDesk:
    """Wire the services around ``store`` (the configured backend by default)."""
    store = store if store is not None else build_store()
    lifecycle = BookingLifecycle(settings.business.currency_symbol)
    desk = ServiceDesk(
        store=store,
        bookings=BookingService(store, lifecycle),
        assignment=AssignmentService(store, lifecycle),
        search=SearchFacade(store),
        reporting=ReportingService(store, settings.business),
    )
    if seed is None:
        seed = settings.store.seed_technicians
    if seed:
        desk.bookings.seed_technicians()
    return desk
