"""Typed errors raised by claim-tracker operations.

Every gated or validated operation either completes or raises exactly one of
these. Errors coming from external collaborators (store, identity gateway,
document storage) are translated into ``UpstreamUnavailable`` or
``UpstreamTimeout`` before they reach the caller.
"""

from typing import Any

from pydantic import ValidationError


class ClaimTrackerError(Exception):
    """Base class for all domain errors."""

    code = "error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message}


class Unauthenticated(ClaimTrackerError):
    """No active session where one is required."""

    code = "unauthenticated"


class Forbidden(ClaimTrackerError):
    """Authenticated, but role or ownership is insufficient."""

    code = "forbidden"


class NotVerified(ClaimTrackerError):
    """Member has not been verified by an administrator yet."""

    code = "not_verified"


class NotFound(ClaimTrackerError):
    """Referenced claim, post or member does not exist."""

    code = "not_found"

    def __init__(self, entity: str, key: str):
        super().__init__(f"{entity} not found: {key}")
        self.entity = entity
        self.key = key

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["entity"] = self.entity
        return data


class DuplicateCarNumber(ClaimTrackerError):
    """Registration collided on the unique car number."""

    code = "duplicate_car_number"

    def __init__(self, car_number: str):
        super().__init__(f"Car number already registered: {car_number}")
        self.car_number = car_number


class ValidationFailed(ClaimTrackerError):
    """A required field is missing, malformed, or out of range."""

    code = "validation_failed"

    def __init__(self, field: str, message: str = ""):
        super().__init__(message or f"Invalid value for {field}")
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["field"] = self.field
        return data

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "ValidationFailed":
        """Build from the first error of a pydantic ValidationError."""
        errors = exc.errors()
        if not errors:
            return cls("input", str(exc))
        first = errors[0]
        loc = first.get("loc") or ("input",)
        field = ".".join(str(part) for part in loc) or "input"
        return cls(field, first.get("msg", "invalid value"))


class UpstreamUnavailable(ClaimTrackerError):
    """An external collaborator failed."""

    code = "upstream_unavailable"


class UpstreamTimeout(ClaimTrackerError):
    """An external collaborator did not respond within the timeout."""

    code = "timeout"
