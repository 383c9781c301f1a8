"""The explicit "who is acting" value passed into every operation."""

from enum import Enum
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from claim_tracker.models.profile import MemberProfile


class Role(str, Enum):
    ANONYMOUS = "anonymous"
    MEMBER = "member"
    ADMIN = "admin"


class Caller(BaseModel):
    """Identity, role and verification state of the acting user."""

    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None
    role: Role = Role.ANONYMOUS
    is_verified: bool = False
    car_number: Optional[str] = None

    @classmethod
    def anonymous(cls) -> "Caller":
        return cls()

    @classmethod
    def from_profile(cls, profile: "MemberProfile") -> "Caller":
        return cls(
            user_id=profile.id,
            role=Role.ADMIN if profile.is_admin else Role.MEMBER,
            is_verified=profile.is_verified,
            car_number=profile.car_number,
        )

    @property
    def is_authenticated(self) -> bool:
        return self.role != Role.ANONYMOUS and self.user_id is not None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def describe(self) -> str:
        """Short label for logs."""
        if not self.is_authenticated:
            return "anonymous"
        return f"{self.role.value}:{self.user_id}"
