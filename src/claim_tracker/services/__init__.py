"""Application services: claims, members, sessions, posts and statistics."""

from claim_tracker.services.auth import SessionController
from claim_tracker.services.claims import ClaimService
from claim_tracker.services.gate import AccessGate
from claim_tracker.services.lifecycle import resolve_status, status_for, validate_progress
from claim_tracker.services.members import MemberService, member_email
from claim_tracker.services.posts import PostService
from claim_tracker.services.stats import StatsService

__all__ = [
    "AccessGate",
    "ClaimService",
    "MemberService",
    "PostService",
    "SessionController",
    "StatsService",
    "member_email",
    "resolve_status",
    "status_for",
    "validate_progress",
]
