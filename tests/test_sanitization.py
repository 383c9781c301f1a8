"""Tests for input sanitization."""

from claim_tracker.utils.sanitization import (
    MAX_DESCRIPTION,
    car_number_slug,
    sanitize_text,
)


def test_sanitize_text_strips_control_chars():
    assert sanitize_text("  rear\x00 bumper\x07 ", 100) == "rear bumper"


def test_sanitize_text_keeps_newlines_and_tabs():
    assert sanitize_text("line one\nline\ttwo", 100) == "line one\nline\ttwo"


def test_sanitize_text_truncates():
    assert len(sanitize_text("x" * (MAX_DESCRIPTION + 50), MAX_DESCRIPTION)) == MAX_DESCRIPTION


def test_sanitize_text_non_string():
    assert sanitize_text(None, 10) == ""
    assert sanitize_text(42, 10) == ""


def test_car_number_slug():
    assert car_number_slug("1234 ABC") == "1234abc"
    assert car_number_slug("12-34/ab") == "1234ab"
    assert car_number_slug("  ") == ""
    assert car_number_slug(None) == ""
