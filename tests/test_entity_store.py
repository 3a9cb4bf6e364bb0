"""Tests for booking/technician creation and the store backends."""

import json
import os

import pytest

from fieldservice.errors import ConcurrentUpdateError, NotFound, ValidationError
from fieldservice.schemas.booking_schema import BookingStatus, PaymentMode
from fieldservice.schemas.customer_schema import Customer
from fieldservice.services import build_desk
from fieldservice.services.catalog import SERVICE_TYPES
from fieldservice.store import JsonFileStore, storage_key
from tests.conftest import booking_fields


class TestCreateBooking:
    def test_new_booking_defaults(self, desk):
        booking = desk.bookings.create_booking(booking_fields())
        assert booking.id.startswith("bk_")
        assert booking.status == BookingStatus.REQUESTED
        assert booking.technician_id is None
        assert booking.amount is None
        assert [h.text for h in booking.history] == ["Booking requested by customer"]
        assert booking.version == 1

    def test_booking_is_visible_to_reads(self, desk):
        booking = desk.bookings.create_booking(booking_fields())
        assert desk.bookings.get_booking(booking.id) == booking

    @pytest.mark.parametrize("field", ["name", "phone", "address"])
    def test_missing_required_field_rejected(self, desk, field):
        with pytest.raises(ValidationError) as exc_info:
            desk.bookings.create_booking(booking_fields(**{field: "   "}))
        assert exc_info.value.fields == [field]
        assert desk.store.booking_count() == 0
        assert desk.store.list_customers() == []

    def test_all_missing_fields_reported_together(self, desk):
        with pytest.raises(ValidationError) as exc_info:
            desk.bookings.create_booking({})
        assert exc_info.value.fields == ["name", "phone", "address"]

    def test_service_type_resolved_from_alias(self, desk):
        booking = desk.bookings.create_booking(booking_fields(service_type="need gas refill"))
        assert booking.service_type == "Gas Filling"

    def test_unknown_service_type_rejected(self, desk):
        with pytest.raises(ValidationError) as exc_info:
            desk.bookings.create_booking(booking_fields(service_type="fridge"))
        assert exc_info.value.fields == ["service_type"]

    def test_invalid_payment_mode_rejected(self, desk):
        with pytest.raises(ValidationError) as exc_info:
            desk.bookings.create_booking(booking_fields(pay_mode="Cheque"))
        assert exc_info.value.fields == ["pay_mode"]

    def test_service_type_defaults_to_first_catalog_entry(self, desk):
        fields = booking_fields()
        del fields["service_type"]
        booking = desk.bookings.create_booking(fields)
        assert booking.service_type == SERVICE_TYPES[0] == "AC Repair"
        assert not booking.is_assigned

    def test_payment_mode_and_notes_kept(self, desk):
        booking = desk.bookings.create_booking(booking_fields(pay_mode="UPI", notes="No cooling since 2 days"))
        assert booking.pay_mode == PaymentMode.UPI
        assert booking.notes == "No cooling since 2 days"

    def test_newest_booking_listed_first(self, desk):
        first = desk.bookings.create_booking(booking_fields(name="First"))
        second = desk.bookings.create_booking(booking_fields(name="Second"))
        assert [b.id for b in desk.bookings.list_bookings()] == [second.id, first.id]

    def test_customer_log_written(self, desk):
        booking = desk.bookings.create_booking(booking_fields(phone="98765 00000"))
        customers = desk.store.list_customers()
        assert len(customers) == 1
        assert customers[0].phone == "9876500000"
        assert customers[0].booking_id == booking.id

    def test_get_unknown_booking(self, desk):
        with pytest.raises(NotFound):
            desk.bookings.get_booking("bk_missing")


class TestCreateTechnician:
    def test_skills_parsed(self, desk):
        tech = desk.bookings.create_technician(
            {"name": "Akash Singh", "phone": "9871000002", "skills": " Window AC, ,Gas Charging ,"}
        )
        assert tech.skills == ["Window AC", "Gas Charging"]
        assert tech.active

    def test_skills_accepted_as_list(self, desk):
        tech = desk.bookings.create_technician(
            {"name": "Akash Singh", "phone": "9871000002", "skills": ["Window AC", " "]}
        )
        assert tech.skills == ["Window AC"]

    def test_default_skills(self, desk):
        tech = desk.bookings.create_technician({"name": "Akash Singh", "phone": "9871000002"})
        assert tech.skills == ["Split AC", "Window AC"]

    def test_missing_phone_rejected(self, desk):
        with pytest.raises(ValidationError) as exc_info:
            desk.bookings.create_technician({"name": "Akash Singh", "phone": ""})
        assert exc_info.value.fields == ["phone"]
        assert desk.bookings.list_technicians() == []

    def test_newest_technician_listed_first(self, desk):
        a = desk.bookings.create_technician({"name": "A", "phone": "1"})
        b = desk.bookings.create_technician({"name": "B", "phone": "2"})
        assert [t.id for t in desk.bookings.list_technicians()] == [b.id, a.id]

    def test_deactivate(self, desk, technician):
        updated = desk.bookings.set_technician_active(technician.id, False)
        assert not updated.active
        assert not desk.bookings.get_technician(technician.id).active

    def test_deactivate_unknown(self, desk):
        with pytest.raises(NotFound):
            desk.bookings.set_technician_active("tech_missing", False)


class TestSeeding:
    def test_seeds_default_roster_once(self, store):
        desk = build_desk(store, seed=True)
        names = [t.name for t in desk.bookings.list_technicians()]
        assert sorted(names) == ["Akash Singh", "Rahul Kumar"]
        assert desk.bookings.seed_technicians() == []
        assert len(desk.bookings.list_technicians()) == 2


class TestInMemoryStore:
    def test_reads_return_copies(self, desk, booking):
        copy = desk.store.get_booking(booking.id)
        copy.status = BookingStatus.COMPLETED
        copy.history.clear()
        stored = desk.store.get_booking(booking.id)
        assert stored.status == BookingStatus.REQUESTED
        assert len(stored.history) == 1

    def test_update_bumps_version(self, desk, booking):
        updated = desk.bookings.confirm(booking.id)
        assert updated.version == booking.version + 1

    def test_stale_version_rejected(self, desk, booking):
        desk.bookings.confirm(booking.id)
        with pytest.raises(ConcurrentUpdateError):
            desk.store.update_booking(booking.id, lambda b: b, expected_version=booking.version)

    def test_failed_mutation_leaves_booking_unchanged(self, desk, booking):
        def explode(b):
            b.status = BookingStatus.CANCELLED
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            desk.store.update_booking(booking.id, explode)
        assert desk.store.get_booking(booking.id) == booking

    def test_update_unknown_booking(self, store):
        with pytest.raises(NotFound):
            store.update_booking("bk_missing", lambda b: b)


class TestJsonFileStore:
    def test_storage_key(self):
        assert storage_key("uniq", "bookings") == "uniq_bookings_v1"

    def test_round_trip_through_disk(self, tmp_path):
        desk = build_desk(JsonFileStore(str(tmp_path)), seed=True)
        booking = desk.bookings.create_booking(booking_fields())
        tech = desk.bookings.list_technicians()[0]
        desk.assignment.assign(booking.id, tech.id)

        reloaded = build_desk(JsonFileStore(str(tmp_path)), seed=True)
        restored = reloaded.bookings.get_booking(booking.id)
        assert restored.status == BookingStatus.ASSIGNED
        assert restored.technician_id == tech.id
        assert len(restored.history) == 2
        assert len(reloaded.bookings.list_technicians()) == 2
        assert len(reloaded.store.list_customers()) == 1

    def test_files_use_namespaced_keys(self, tmp_path):
        store = JsonFileStore(str(tmp_path), key_prefix="uniq", key_version=1)
        build_desk(store, seed=False).bookings.create_booking(booking_fields())
        data = json.loads((tmp_path / "uniq_bookings_v1.json").read_text(encoding="utf-8"))
        assert isinstance(data, list)
        assert data[0]["name"] == "Asha Rao"
        assert data[0]["history"][0]["text"] == "Booking requested by customer"

    def test_corrupt_file_falls_back_to_empty(self, tmp_path):
        (tmp_path / "uniq_bookings_v1.json").write_text("{not json", encoding="utf-8")
        (tmp_path / "uniq_technicians_v1.json").write_text('{"a": 1}', encoding="utf-8")
        store = JsonFileStore(str(tmp_path))
        assert store.list_bookings() == []
        assert store.list_technicians() == []


def _failing_replace(real_replace, target_suffix=""):
    def replace(src, dst):
        if str(dst).endswith(target_suffix):
            raise OSError("disk full")
        return real_replace(src, dst)
    return replace


class TestJsonFileStoreWriteFailures:
    def test_failed_update_rolls_back_memory(self, tmp_path, monkeypatch):
        desk = build_desk(JsonFileStore(str(tmp_path)), seed=False)
        booking = desk.bookings.create_booking(booking_fields())

        monkeypatch.setattr(os, "replace", _failing_replace(os.replace))
        with pytest.raises(OSError):
            desk.bookings.confirm(booking.id)
        monkeypatch.undo()

        current = desk.bookings.get_booking(booking.id)
        assert current == booking
        assert current.status == BookingStatus.REQUESTED
        assert len(current.history) == 1

        confirmed = desk.bookings.confirm(booking.id)
        assert confirmed.version == 2
        assert len(confirmed.history) == 2

    def test_failed_customer_write_drops_booking(self, tmp_path, monkeypatch):
        desk = build_desk(JsonFileStore(str(tmp_path)), seed=False)
        monkeypatch.setattr(os, "replace", _failing_replace(os.replace, "customers_v1.json"))
        with pytest.raises(OSError):
            desk.bookings.create_booking(booking_fields())
        monkeypatch.undo()

        assert desk.store.booking_count() == 0
        assert desk.store.list_customers() == []
        reloaded = JsonFileStore(str(tmp_path))
        assert reloaded.list_bookings() == []

    def test_failed_technician_writes_roll_back(self, tmp_path, monkeypatch):
        desk = build_desk(JsonFileStore(str(tmp_path)), seed=False)
        tech = desk.bookings.create_technician({"name": "Rahul Kumar", "phone": "9871000001"})

        monkeypatch.setattr(os, "replace", _failing_replace(os.replace))
        with pytest.raises(OSError):
            desk.bookings.set_technician_active(tech.id, False)
        with pytest.raises(OSError):
            desk.bookings.create_technician({"name": "Akash Singh", "phone": "9871000002"})
        monkeypatch.undo()

        assert desk.bookings.list_technicians() == [tech]
        assert desk.bookings.get_technician(tech.id).active is True

    def test_failed_customer_add_rolls_back(self, tmp_path, monkeypatch):
        store = JsonFileStore(str(tmp_path))
        monkeypatch.setattr(os, "replace", _failing_replace(os.replace))
        with pytest.raises(OSError):
            store.add_customer(Customer(name="Asha Rao", phone="9876500000", address="12 MG Road", booking_id="bk_x"))
        monkeypatch.undo()
        assert store.list_customers() == []
