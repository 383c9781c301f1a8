"""Tests for the claim progress/status state machine."""

import pytest

from claim_tracker.exceptions import ValidationFailed
from claim_tracker.models.claim import ClaimStatus, StatusMode
from claim_tracker.services.lifecycle import (
    parse_status,
    resolve_status,
    status_for,
    validate_progress,
)


@pytest.mark.parametrize(
    "progress,expected",
    [
        (0, ClaimStatus.SUBMITTED),
        (49, ClaimStatus.SUBMITTED),
        (50, ClaimStatus.UNDER_REVIEW),
        (74, ClaimStatus.UNDER_REVIEW),
        (75, ClaimStatus.PROCESSING),
        (99, ClaimStatus.PROCESSING),
        (100, ClaimStatus.COMPLETED),
    ],
)
def test_status_for_band_edges(progress, expected):
    assert status_for(progress) == expected


def test_status_for_is_deterministic_over_full_range():
    """Every value 0..100 maps to one band status, and never to rejected."""
    for p in range(0, 101):
        assert status_for(p) == status_for(p)
        assert status_for(p) != ClaimStatus.REJECTED


@pytest.mark.parametrize("bad", [-1, 101, 1000, 50.5, "50", None, True])
def test_validate_progress_rejects_out_of_range_and_non_int(bad):
    with pytest.raises(ValidationFailed) as exc:
        validate_progress(bad)
    assert exc.value.field == "progress"


def test_validate_progress_accepts_any_integer_in_range():
    """Step granularity of 5 is a UI convention, not enforced."""
    assert validate_progress(37) == 37
    assert validate_progress(0) == 0
    assert validate_progress(100) == 100


def test_parse_status_accepts_enum_and_strings():
    assert parse_status("Rejected") == ClaimStatus.REJECTED
    assert parse_status(ClaimStatus.PROCESSING) == ClaimStatus.PROCESSING
    with pytest.raises(ValidationFailed) as exc:
        parse_status("archived")
    assert exc.value.field == "status"


class TestResolveStatus:
    def test_automatic_recompute(self):
        status, mode = resolve_status(StatusMode.AUTOMATIC, ClaimStatus.SUBMITTED, 80)
        assert status == ClaimStatus.PROCESSING
        assert mode == StatusMode.AUTOMATIC

    def test_explicit_rejected_pins_manual(self):
        status, mode = resolve_status(StatusMode.AUTOMATIC, ClaimStatus.PROCESSING, 80, "rejected")
        assert status == ClaimStatus.REJECTED
        assert mode == StatusMode.MANUAL

    def test_explicit_status_matching_band_is_automatic(self):
        status, mode = resolve_status(StatusMode.MANUAL, ClaimStatus.REJECTED, 100, "completed")
        assert status == ClaimStatus.COMPLETED
        assert mode == StatusMode.AUTOMATIC

    def test_explicit_status_from_other_band_rejected(self):
        with pytest.raises(ValidationFailed) as exc:
            resolve_status(StatusMode.AUTOMATIC, ClaimStatus.SUBMITTED, 10, "completed")
        assert exc.value.field == "status"

    def test_manual_status_survives_progress_update(self):
        status, mode = resolve_status(StatusMode.MANUAL, ClaimStatus.REJECTED, 60)
        assert status == ClaimStatus.REJECTED
        assert mode == StatusMode.MANUAL

    def test_resume_automatic_leaves_manual(self):
        status, mode = resolve_status(
            StatusMode.MANUAL, ClaimStatus.REJECTED, 60, resume_automatic=True
        )
        assert status == ClaimStatus.UNDER_REVIEW
        assert mode == StatusMode.AUTOMATIC

    def test_invalid_progress_rejected_before_status_logic(self):
        with pytest.raises(ValidationFailed):
            resolve_status(StatusMode.AUTOMATIC, ClaimStatus.SUBMITTED, 120, "rejected")
