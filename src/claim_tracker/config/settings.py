"""Centralized configuration from environment variables with defaults."""

import os

from dotenv import load_dotenv

load_dotenv()


def _float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _str(key: str, default: str) -> str:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


# ---------------------------------------------------------------------------
# Storage locations
# ---------------------------------------------------------------------------

def get_upload_dir() -> str:
    """Directory where uploaded documents are written."""
    return _str("CLAIM_TRACKER_UPLOAD_DIR", "data/uploads")


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

MIN_PASSWORD_LENGTH = _int("CLAIM_TRACKER_MIN_PASSWORD_LENGTH", 6)
ADMIN_CAR_NUMBER = "ADMIN001"


def get_email_domain() -> str:
    """Domain of the synthetic email derived from a member's car number."""
    return _str("CLAIM_TRACKER_EMAIL_DOMAIN", "ongaas.mr")


def get_admin_email() -> str | None:
    """Email allowed to provision the administrator account (None disables it)."""
    raw = os.environ.get("CLAIM_TRACKER_ADMIN_EMAIL", "").strip()
    return raw.lower() or None


def get_admin_password() -> str | None:
    raw = os.environ.get("CLAIM_TRACKER_ADMIN_PASSWORD")
    return raw or None


# ---------------------------------------------------------------------------
# Claims
# ---------------------------------------------------------------------------

MAX_ACCIDENT_PHOTOS = _int("CLAIM_TRACKER_MAX_PHOTOS", 2)
CLAIM_NUMBER_PREFIX = _str("CLAIM_TRACKER_CLAIM_PREFIX", "CLM")


# ---------------------------------------------------------------------------
# External collaborator calls
# ---------------------------------------------------------------------------

def get_upstream_config() -> dict[str, float | int]:
    """Timeout and retry policy for calls to the store, identity and storage."""
    return {
        "timeout": _float("CLAIM_TRACKER_UPSTREAM_TIMEOUT", 10.0),
        "max_attempts": _int("CLAIM_TRACKER_RETRY_ATTEMPTS", 3),
        "min_wait": _float("CLAIM_TRACKER_RETRY_MIN_WAIT", 0.5),
        "max_wait": _float("CLAIM_TRACKER_RETRY_MAX_WAIT", 5.0),
    }
