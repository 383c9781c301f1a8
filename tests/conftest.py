"""Shared pytest fixtures for all test files."""

import os
import tempfile
from typing import Any

import pytest

from claim_tracker.app import build_app
from claim_tracker.db.database import init_db
from claim_tracker.models.caller import Caller
from claim_tracker.utils.retry import UpstreamCaller

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-secret"


def registration(car_number: str = "1234ABC", **overrides: Any) -> dict[str, Any]:
    """Valid sign-up fields for a member."""
    data = {
        "full_name": "Sidi Mohamed",
        "car_number": car_number,
        "phone_number": "+222 22 00 00 00",
        "password": "secret123",
        "insurance_start_date": "2025-01-01",
        "insurance_end_date": "2025-12-31",
    }
    data.update(overrides)
    return data


def claim_fields(**overrides: Any) -> dict[str, Any]:
    """Valid claim submission fields."""
    data = {
        "accident_date": "2025-01-15",
        "description": "fender damage",
        "insurance_receipt_url": "file:///docs/receipt.pdf",
        "police_report_url": "file:///docs/report.pdf",
    }
    data.update(overrides)
    return data


@pytest.fixture(autouse=True)
def temp_db():
    """Use a temporary SQLite DB for tests."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    init_db(path)
    prev = os.environ.get("CLAIMS_DB_PATH")
    os.environ["CLAIMS_DB_PATH"] = path
    try:
        yield path
    finally:
        if prev is None:
            os.environ.pop("CLAIMS_DB_PATH", None)
        else:
            os.environ["CLAIMS_DB_PATH"] = prev
        try:
            os.unlink(path)
        except OSError:
            # Ignore errors when cleaning up the temporary DB file (e.g., if already removed).
            pass


@pytest.fixture
def fast_upstream():
    """Upstream caller with short retry waits."""
    return UpstreamCaller(timeout=10.0, max_attempts=2, min_wait=0.01, max_wait=0.02)


@pytest.fixture
def app(temp_db, tmp_path, fast_upstream):
    return build_app(
        db_path=temp_db,
        upload_dir=str(tmp_path / "uploads"),
        upstream=fast_upstream,
    )


@pytest.fixture
def admin(app, monkeypatch) -> Caller:
    """The bootstrapped administrator."""
    monkeypatch.setenv("CLAIM_TRACKER_ADMIN_EMAIL", ADMIN_EMAIL)
    profile = app.sessions.bootstrap_admin(ADMIN_EMAIL, ADMIN_PASSWORD)
    return Caller.from_profile(profile)


@pytest.fixture
def make_member(app, admin):
    """Factory: register a member (verified unless verified=False) and return their Caller."""

    def _make(car_number: str = "1234ABC", verified: bool = True, **overrides: Any) -> Caller:
        profile = app.members.register_member(registration(car_number, **overrides))
        if verified:
            profile = app.members.verify_member(admin, profile.id)
        return Caller.from_profile(profile)

    return _make


@pytest.fixture
def member(make_member) -> Caller:
    """A verified member."""
    return make_member("1234ABC")


@pytest.fixture
def unverified_member(make_member) -> Caller:
    return make_member("5678XYZ", verified=False)
