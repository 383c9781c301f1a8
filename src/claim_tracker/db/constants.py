"""Claim status constants.

Status is normally derived from progress (see PROGRESS_BANDS). ``rejected`` is
only reachable through an explicit administrator override.
"""

STATUS_SUBMITTED = "submitted"
STATUS_UNDER_REVIEW = "under_review"
STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_REJECTED = "rejected"

# All allowed claim statuses (single source of truth for validation/docs)
CLAIM_STATUSES = (
    STATUS_SUBMITTED,
    STATUS_UNDER_REVIEW,
    STATUS_PROCESSING,
    STATUS_COMPLETED,
    STATUS_REJECTED,
)

# (lower bound inclusive, status), highest bound first
PROGRESS_BANDS = (
    (100, STATUS_COMPLETED),
    (75, STATUS_PROCESSING),
    (50, STATUS_UNDER_REVIEW),
    (0, STATUS_SUBMITTED),
)

MIN_PROGRESS = 0
MAX_PROGRESS = 100

MODE_AUTOMATIC = "automatic"
MODE_MANUAL = "manual"

# Audit log actions
ACTION_CREATED = "created"
ACTION_PROGRESS_UPDATED = "progress_updated"
