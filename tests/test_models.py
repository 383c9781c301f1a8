"""Tests for pydantic models and error conversion."""

from datetime import date

import pytest
from pydantic import ValidationError

from claim_tracker.exceptions import NotFound, ValidationFailed
from claim_tracker.models.caller import Caller, Role
from claim_tracker.models.claim import Claim, ClaimInput, ClaimStatus
from claim_tracker.models.profile import MemberProfile, ProfileUpdate, RegistrationInput


def _claim(**overrides):
    data = {
        "id": "c1",
        "claim_number": "CLM-2025-00001",
        "user_id": "u1",
        "car_number": "1234ABC",
        "accident_date": "2025-01-15",
        "description": "fender damage",
        "insurance_receipt_url": "r",
        "police_report_url": "p",
    }
    data.update(overrides)
    return Claim.model_validate(data)


class TestCaller:
    def test_anonymous(self):
        caller = Caller.anonymous()
        assert not caller.is_authenticated
        assert not caller.is_admin
        assert caller.describe() == "anonymous"

    def test_from_profile(self):
        profile = MemberProfile(
            id="u1", email="a@b", full_name="A", car_number="AB1", phone_number="1", is_verified=True
        )
        caller = Caller.from_profile(profile)
        assert caller.role == Role.MEMBER
        assert caller.is_verified
        assert caller.describe() == "member:u1"

    def test_role_without_user_is_not_authenticated(self):
        assert not Caller(role=Role.ADMIN).is_authenticated

    def test_frozen(self):
        caller = Caller(user_id="u1", role=Role.MEMBER)
        with pytest.raises(ValidationError):
            caller.role = Role.ADMIN


class TestClaimModels:
    def test_claim_input_parses_date_and_trims(self):
        data = ClaimInput(
            accident_date="2025-01-15",
            description="  fender damage ",
            insurance_receipt_url="r",
            police_report_url="p",
            accident_photos=["a", None, ""],
        )
        assert data.accident_date == date(2025, 1, 15)
        assert data.description == "fender damage"
        assert data.accident_photos == ["a"]

    def test_claim_input_rejects_bad_date(self):
        with pytest.raises(ValidationError):
            ClaimInput(
                accident_date="15/01/2025",
                description="d",
                insurance_receipt_url="r",
                police_report_url="p",
            )

    def test_claim_progress_bounds(self):
        assert _claim(progress=100).progress == 100
        with pytest.raises(ValidationError):
            _claim(progress=101)

    @pytest.mark.parametrize(
        "status,terminal",
        [("submitted", False), ("processing", False), ("completed", True), ("rejected", True)],
    )
    def test_is_terminal(self, status, terminal):
        assert _claim(status=status).is_terminal is terminal

    def test_status_enum_values(self):
        assert [s.value for s in ClaimStatus] == [
            "submitted",
            "under_review",
            "processing",
            "completed",
            "rejected",
        ]


class TestProfileModels:
    def test_registration_password_not_in_repr(self):
        data = RegistrationInput(
            full_name="A",
            car_number="AB1",
            phone_number="1",
            password="secret123",
            insurance_start_date="2025-01-01",
            insurance_end_date="2025-12-31",
        )
        assert "secret123" not in repr(data)

    def test_profile_update_patch_only_set_fields(self):
        patch = ProfileUpdate(phone_number=" 42 ", insurance_end_date="2026-01-01").to_patch()
        assert patch == {"phone_number": "42", "insurance_end_date": "2026-01-01"}


class TestErrors:
    def test_from_pydantic_names_first_field(self):
        with pytest.raises(ValidationError) as exc:
            ClaimInput(accident_date="2025-01-15", description="d", insurance_receipt_url="r")
        error = ValidationFailed.from_pydantic(exc.value)
        assert error.field == "police_report_url"
        assert error.to_dict()["error"] == "validation_failed"
        assert error.to_dict()["field"] == "police_report_url"

    def test_not_found_dict(self):
        assert NotFound("claim", "CLM-1").to_dict() == {
            "error": "not_found",
            "message": "claim not found: CLM-1",
            "entity": "claim",
        }
