"""Tests for shared utility functions."""

from fieldservice.logging_context import RequestIdFilter, get_request_id, get_request_logger, set_request_id
from fieldservice.utils import new_id, normalize_phone, parse_skills


class TestNormalizePhone:
    def test_strips_spaces(self):
        assert normalize_phone("98710 00001") == "9871000001"

    def test_strips_dashes(self):
        assert normalize_phone("987-100-0001") == "9871000001"

    def test_preserves_leading_plus(self):
        assert normalize_phone("+91 98710 00001") == "+919871000001"

    def test_mixed_separators(self):
        assert normalize_phone("  +91 (987) 100-0001 ") == "+919871000001"


class TestParseSkills:
    def test_trims_and_drops_empty(self):
        assert parse_skills(" Split AC, ,Window AC ,") == ["Split AC", "Window AC"]

    def test_deduplicates_keeping_order(self):
        assert parse_skills("Gas Charging, Split AC, Gas Charging") == ["Gas Charging", "Split AC"]

    def test_empty_string(self):
        assert parse_skills("") == []


class TestNewId:
    def test_prefix_and_length(self):
        value = new_id("bk")
        assert value.startswith("bk_")
        assert len(value) == len("bk_") + 8

    def test_ids_differ(self):
        assert len({new_id("tech") for _ in range(200)}) == 200


class TestRequestLogging:
    def test_filter_attached_once(self):
        logger = get_request_logger("fieldservice.tests.logging")
        get_request_logger("fieldservice.tests.logging")
        assert sum(isinstance(f, RequestIdFilter) for f in logger.filters) == 1

    def test_request_id_injected_into_records(self, caplog):
        set_request_id("REQ-test01")
        assert get_request_id() == "REQ-test01"
        logger = get_request_logger("fieldservice.tests.records")
        with caplog.at_level("INFO", logger="fieldservice.tests.records"):
            logger.info("hello")
        assert caplog.records[-1].request_id == "REQ-test01"
