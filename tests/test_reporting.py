"""Tests for technician earnings and booking summaries."""

import pytest

from fieldservice.config import BusinessConfig
from fieldservice.errors import NotFound
from fieldservice.services.reporting import ReportingService
from tests.conftest import booking_fields


def finish_job(desk, technician_id: str, amount) -> None:
    booking = desk.bookings.create_booking(booking_fields())
    desk.assignment.assign(booking.id, technician_id)
    desk.bookings.start(booking.id)
    desk.bookings.complete(booking.id, amount)


class TestTechnicianEarnings:
    def test_no_jobs(self, desk, technician):
        earnings = desk.reporting.technician_earnings(technician.id)
        assert earnings.completed_jobs == 0
        assert earnings.payout == 0

    def test_payout_rule(self, store, desk, technician):
        finish_job(desk, technician.id, 1000)
        finish_job(desk, technician.id, 500)
        open_job = desk.bookings.create_booking(booking_fields())
        desk.assignment.assign(open_job.id, technician.id)

        reporting = ReportingService(store, BusinessConfig(payout_per_visit=300, payout_labor_share=0.2))
        earnings = reporting.technician_earnings(technician.id)
        assert earnings.assigned_jobs == 3
        assert earnings.completed_jobs == 2
        assert earnings.billed_total == 1500
        assert earnings.payout == pytest.approx(2 * 300 + 0.2 * 1500)

    def test_unknown_technician(self, desk):
        with pytest.raises(NotFound):
            desk.reporting.technician_earnings("tech_missing")


class TestSummary:
    def test_counts_by_status(self, desk, technician):
        finish_job(desk, technician.id, 700)
        cancelled = desk.bookings.create_booking(booking_fields())
        desk.bookings.cancel(cancelled.id)
        desk.bookings.create_booking(booking_fields())

        summary = desk.reporting.summary()
        assert summary.total == 3
        assert summary.unassigned == 1
        assert summary.by_status["Completed"] == 1
        assert summary.by_status["Cancelled"] == 1
        assert summary.by_status["Requested"] == 1
        assert summary.by_status["On The Way"] == 0
