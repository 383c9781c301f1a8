"""Pydantic models for claim input, stored claims, and audit entries."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from claim_tracker.config.settings import MAX_ACCIDENT_PHOTOS
from claim_tracker.db import constants
from claim_tracker.utils.sanitization import MAX_DESCRIPTION, MAX_URL, sanitize_text


class ClaimStatus(str, Enum):
    """Progress pipeline label of a claim."""

    SUBMITTED = constants.STATUS_SUBMITTED
    UNDER_REVIEW = constants.STATUS_UNDER_REVIEW
    PROCESSING = constants.STATUS_PROCESSING
    COMPLETED = constants.STATUS_COMPLETED
    REJECTED = constants.STATUS_REJECTED


class StatusMode(str, Enum):
    """Whether status follows progress or was set by an administrator."""

    AUTOMATIC = constants.MODE_AUTOMATIC
    MANUAL = constants.MODE_MANUAL


def _required_reference(value: Optional[str]) -> str:
    cleaned = sanitize_text(value, MAX_URL)
    if not cleaned:
        raise ValueError("document reference is required")
    return cleaned


class ClaimInput(BaseModel):
    """Fields a member supplies when submitting a claim."""

    accident_date: date = Field(..., description="Date of the accident (YYYY-MM-DD)")
    description: str = Field(..., description="Free-text description of the accident")
    insurance_receipt_url: str = Field(..., description="Reference to the insurance receipt")
    police_report_url: str = Field(..., description="Reference to the police report")
    accident_photos: list[str] = Field(
        default_factory=list, description="Up to two accident photo references"
    )

    @field_validator("accident_date")
    @classmethod
    def _not_in_future(cls, value: date) -> date:
        if value > date.today():
            raise ValueError("accident date cannot be in the future")
        return value

    @field_validator("description")
    @classmethod
    def _non_empty_description(cls, value: str) -> str:
        cleaned = sanitize_text(value, MAX_DESCRIPTION)
        if not cleaned:
            raise ValueError("description is required")
        return cleaned

    @field_validator("insurance_receipt_url", "police_report_url", mode="before")
    @classmethod
    def _reference_present(cls, value: Optional[str]) -> str:
        return _required_reference(value)

    @field_validator("accident_photos", mode="before")
    @classmethod
    def _photo_limit(cls, value: Optional[list[Optional[str]]]) -> list[str]:
        if value is None:
            return []
        photos = [sanitize_text(p, MAX_URL) for p in value if p]
        photos = [p for p in photos if p]
        if len(photos) > MAX_ACCIDENT_PHOTOS:
            raise ValueError(f"at most {MAX_ACCIDENT_PHOTOS} accident photos are allowed")
        return photos


class Claim(BaseModel):
    """A stored claim."""

    id: str
    claim_number: str
    user_id: str
    car_number: str
    accident_date: str
    description: str
    accident_photo_1_url: Optional[str] = None
    accident_photo_2_url: Optional[str] = None
    insurance_receipt_url: str
    police_report_url: str
    progress: int = Field(default=0, ge=constants.MIN_PROGRESS, le=constants.MAX_PROGRESS)
    status: ClaimStatus = ClaimStatus.SUBMITTED
    status_mode: StatusMode = StatusMode.AUTOMATIC
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (ClaimStatus.COMPLETED, ClaimStatus.REJECTED)


class ClaimAuditEntry(BaseModel):
    """One row of a claim's audit log."""

    id: int
    claim_id: str
    action: str
    actor_id: Optional[str] = None
    old_status: Optional[str] = None
    new_status: Optional[str] = None
    old_progress: Optional[int] = None
    new_progress: Optional[int] = None
    details: Optional[str] = None
    created_at: Optional[str] = None
