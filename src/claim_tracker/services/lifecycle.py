"""Claim progress/status state machine.

Status is a pure function of progress (``status_for``) while a claim is in
AUTOMATIC mode. An administrator may pin ``rejected`` explicitly, which moves
the claim to MANUAL mode; later progress updates keep the pinned status until
the administrator asks to resume automatic status.
"""

from typing import Any, Optional

from claim_tracker.db.constants import MAX_PROGRESS, MIN_PROGRESS, PROGRESS_BANDS
from claim_tracker.exceptions import ValidationFailed
from claim_tracker.models.claim import ClaimStatus, StatusMode


def validate_progress(value: Any) -> int:
    """Return value if it is an integer in [0, 100]; otherwise raise ValidationFailed.

    Out-of-range values are rejected, never clamped.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationFailed("progress", "progress must be an integer percentage")
    if not MIN_PROGRESS <= value <= MAX_PROGRESS:
        raise ValidationFailed(
            "progress", f"progress must be between {MIN_PROGRESS} and {MAX_PROGRESS}"
        )
    return value


def status_for(progress: int) -> ClaimStatus:
    """Status implied by progress: 0-49 submitted, 50-74 under_review, 75-99 processing, 100 completed."""
    progress = validate_progress(progress)
    for lower_bound, status in PROGRESS_BANDS:
        if progress >= lower_bound:
            return ClaimStatus(status)
    return ClaimStatus.SUBMITTED


def parse_status(value: Any) -> ClaimStatus:
    if isinstance(value, ClaimStatus):
        return value
    try:
        return ClaimStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationFailed("status", f"Unknown claim status: {value}") from None


def resolve_status(
    current_mode: StatusMode,
    current_status: ClaimStatus,
    new_progress: int,
    explicit_status: Optional[Any] = None,
    resume_automatic: bool = False,
) -> tuple[ClaimStatus, StatusMode]:
    """Work out (status, mode) after a progress update.

    - explicit ``rejected``: pinned, MANUAL.
    - explicit status matching the progress band: AUTOMATIC.
    - explicit status from another band: ValidationFailed("status").
    - no explicit status while MANUAL: status kept, unless resume_automatic.
    - otherwise: status recomputed from progress, AUTOMATIC.
    """
    implied = status_for(new_progress)

    if explicit_status is not None:
        requested = parse_status(explicit_status)
        if requested == ClaimStatus.REJECTED:
            return ClaimStatus.REJECTED, StatusMode.MANUAL
        if requested != implied:
            raise ValidationFailed(
                "status",
                f"status {requested.value} does not match progress {new_progress} "
                f"(expected {implied.value})",
            )
        return implied, StatusMode.AUTOMATIC

    if current_mode == StatusMode.MANUAL and not resume_automatic:
        return current_status, StatusMode.MANUAL

    return implied, StatusMode.AUTOMATIC
