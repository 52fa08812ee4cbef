"""Tests for logging helpers"""
from storefront.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging


def test_get_logger_is_cached():
    assert get_logger("storefront.x") is get_logger("storefront.x")


def test_sanitize_id():
    assert sanitize_id_for_logging(None) == "N/A"
    assert sanitize_id_for_logging("65f1c0a1b2c3") == "65f1c0a1"
    assert sanitize_id_for_logging("a\nb") == "a\\nb"


def test_sanitize_string():
    assert sanitize_string_for_logging("") == "N/A"
    assert sanitize_string_for_logging("x" * 60, max_length=10) == "x" * 10 + "..."
    assert sanitize_string_for_logging("line\r\nbreak") == "line\\r\\nbreak"
