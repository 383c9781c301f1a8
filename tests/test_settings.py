"""Tests for centralized settings."""

from claim_tracker.config.settings import (
    ADMIN_CAR_NUMBER,
    MAX_ACCIDENT_PHOTOS,
    get_admin_email,
    get_email_domain,
    get_upload_dir,
    get_upstream_config,
)


def test_constants():
    assert ADMIN_CAR_NUMBER == "ADMIN001"
    assert MAX_ACCIDENT_PHOTOS == 2


def test_upstream_config_defaults(monkeypatch):
    for key in (
        "CLAIM_TRACKER_UPSTREAM_TIMEOUT",
        "CLAIM_TRACKER_RETRY_ATTEMPTS",
        "CLAIM_TRACKER_RETRY_MIN_WAIT",
        "CLAIM_TRACKER_RETRY_MAX_WAIT",
    ):
        monkeypatch.delenv(key, raising=False)
    assert get_upstream_config() == {
        "timeout": 10.0,
        "max_attempts": 3,
        "min_wait": 0.5,
        "max_wait": 5.0,
    }


def test_upstream_config_ignores_garbage(monkeypatch):
    monkeypatch.setenv("CLAIM_TRACKER_UPSTREAM_TIMEOUT", "soon")
    monkeypatch.setenv("CLAIM_TRACKER_RETRY_ATTEMPTS", "2")
    config = get_upstream_config()
    assert config["timeout"] == 10.0
    assert config["max_attempts"] == 2


def test_email_domain(monkeypatch):
    monkeypatch.delenv("CLAIM_TRACKER_EMAIL_DOMAIN", raising=False)
    assert get_email_domain() == "ongaas.mr"
    monkeypatch.setenv("CLAIM_TRACKER_EMAIL_DOMAIN", "example.org")
    assert get_email_domain() == "example.org"


def test_admin_email(monkeypatch):
    monkeypatch.delenv("CLAIM_TRACKER_ADMIN_EMAIL", raising=False)
    assert get_admin_email() is None
    monkeypatch.setenv("CLAIM_TRACKER_ADMIN_EMAIL", "  Boss@Example.COM ")
    assert get_admin_email() == "boss@example.com"


def test_upload_dir(monkeypatch):
    monkeypatch.setenv("CLAIM_TRACKER_UPLOAD_DIR", "  ")
    assert get_upload_dir() == "data/uploads"
    monkeypatch.setenv("CLAIM_TRACKER_UPLOAD_DIR", "/srv/uploads")
    assert get_upload_dir() == "/srv/uploads"
