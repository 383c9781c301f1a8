"""Pydantic models for member profiles, registration and profile edits."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from claim_tracker.config.settings import MIN_PASSWORD_LENGTH
from claim_tracker.utils.sanitization import (
    MAX_CAR_NUMBER,
    MAX_FULL_NAME,
    MAX_PHONE_NUMBER,
    MAX_URL,
    car_number_slug,
    sanitize_text,
)


def _required_text(value: Optional[str], max_length: int, label: str) -> str:
    cleaned = sanitize_text(value, max_length)
    if not cleaned:
        raise ValueError(f"{label} is required")
    return cleaned


def _optional_reference(value: Optional[str]) -> Optional[str]:
    cleaned = sanitize_text(value, MAX_URL)
    return cleaned or None


class MemberProfile(BaseModel):
    """A stored profile: one per member or administrator."""

    id: str
    email: str
    full_name: str
    car_number: str
    phone_number: str
    profile_picture_url: Optional[str] = None
    drivers_license_url: Optional[str] = None
    insurance_start_date: Optional[str] = None
    insurance_end_date: Optional[str] = None
    is_verified: bool = False
    is_admin: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class RegistrationInput(BaseModel):
    """Sign-up form for a new member."""

    full_name: str = Field(..., description="Member's full name")
    car_number: str = Field(..., description="Car registration number (unique)")
    phone_number: str = Field(..., description="Contact phone number")
    password: str = Field(..., description="Account password", repr=False)
    insurance_start_date: date = Field(..., description="Insurance coverage start (YYYY-MM-DD)")
    insurance_end_date: date = Field(..., description="Insurance coverage end (YYYY-MM-DD)")
    profile_picture_url: Optional[str] = Field(default=None, description="Profile picture reference")
    drivers_license_url: Optional[str] = Field(default=None, description="Driver's license scan reference")

    @field_validator("full_name", mode="before")
    @classmethod
    def _name(cls, value: Optional[str]) -> str:
        return _required_text(value, MAX_FULL_NAME, "full name")

    @field_validator("car_number", mode="before")
    @classmethod
    def _car_number(cls, value: Optional[str]) -> str:
        cleaned = _required_text(value, MAX_CAR_NUMBER, "car number")
        if not car_number_slug(cleaned):
            raise ValueError("car number must contain letters or digits")
        return cleaned

    @field_validator("phone_number", mode="before")
    @classmethod
    def _phone(cls, value: Optional[str]) -> str:
        return _required_text(value, MAX_PHONE_NUMBER, "phone number")

    @field_validator("password")
    @classmethod
    def _password_length(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"password must be at least {MIN_PASSWORD_LENGTH} characters")
        return value

    @field_validator("profile_picture_url", "drivers_license_url", mode="before")
    @classmethod
    def _references(cls, value: Optional[str]) -> Optional[str]:
        return _optional_reference(value)

    @model_validator(mode="after")
    def _insurance_window(self) -> "RegistrationInput":
        if self.insurance_end_date < self.insurance_start_date:
            raise ValueError("insurance end date precedes start date")
        return self


class ProfileUpdate(BaseModel):
    """Owner-editable profile fields. Unset fields are left unchanged.

    Name and phone number may be omitted but never cleared.
    """

    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    insurance_start_date: Optional[date] = None
    insurance_end_date: Optional[date] = None
    profile_picture_url: Optional[str] = None
    drivers_license_url: Optional[str] = None

    @field_validator("full_name", mode="before")
    @classmethod
    def _name(cls, value: Optional[str]) -> str:
        return _required_text(value, MAX_FULL_NAME, "full name")

    @field_validator("phone_number", mode="before")
    @classmethod
    def _phone(cls, value: Optional[str]) -> str:
        return _required_text(value, MAX_PHONE_NUMBER, "phone number")

    @field_validator("profile_picture_url", "drivers_license_url", mode="before")
    @classmethod
    def _references(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _optional_reference(value)

    def to_patch(self) -> dict:
        """Fields explicitly set by the caller, dates as ISO strings."""
        patch = self.model_dump(exclude_unset=True)
        for key in ("insurance_start_date", "insurance_end_date"):
            if isinstance(patch.get(key), date):
                patch[key] = patch[key].isoformat()
        return patch
