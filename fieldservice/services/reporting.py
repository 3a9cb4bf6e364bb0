"""
Booking and payout summaries for the admin and technician consoles.

Payout follows the demo rule: a flat amount per completed visit plus a
share of the billed labor, both configurable through BusinessConfig.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from fieldservice.config import BusinessConfig, settings
from fieldservice.errors import NotFound
from fieldservice.schemas.booking_schema import BookingStatus
from fieldservice.store.base import EntityStore

logger = logging.getLogger(__name__)


@dataclass
class TechnicianEarnings:
    """Completed-work totals for one technician."""

    technician_id: str
    technician_name: str
    assigned_jobs: int = 0
    completed_jobs: int = 0
    billed_total: float = 0.0
    payout: float = 0.0


@dataclass
class BookingSummary:
    """Counts across the whole booking collection."""

    total: int = 0
    unassigned: int = 0
    by_status: dict[str, int] = field(default_factory=dict)


class ReportingService:
    """Read-only aggregates over the store."""

    def __init__(self, store: EntityStore, business: Optional[BusinessConfig] = None) -> None:
        self.store = store
        self.business = business or settings.business

    def technician_earnings(self, technician_id: str) -> TechnicianEarnings:
        technician = self.store.get_technician(technician_id)
        if technician is None:
            raise NotFound("Technician", technician_id)

        jobs = [b for b in self.store.list_bookings() if b.technician_id == technician_id]
        completed = [b for b in jobs if b.status == BookingStatus.COMPLETED]
        billed = sum(b.amount or 0.0 for b in completed)
        payout = (
            len(completed) * self.business.payout_per_visit
            + billed * self.business.payout_labor_share
        )

        earnings = TechnicianEarnings(
            technician_id=technician.id,
            technician_name=technician.name,
            assigned_jobs=len(jobs),
            completed_jobs=len(completed),
            billed_total=round(billed, 2),
            payout=round(payout, 2),
        )
        logger.debug("Earnings for %s: %s", technician_id, earnings)
        return earnings

    def summary(self) -> BookingSummary:
        bookings = self.store.list_bookings()
        by_status = {status.value: 0 for status in BookingStatus}
        for booking in bookings:
            by_status[booking.status.value] += 1
        return BookingSummary(
            total=len(bookings),
            unassigned=sum(
                1 for b in bookings
                if not b.is_assigned and b.status != BookingStatus.CANCELLED
            ),
            by_status=by_status,
        )
