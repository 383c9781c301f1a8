"""Pydantic models for profiles, claims, posts and the acting caller."""

from claim_tracker.models.caller import Caller, Role
from claim_tracker.models.claim import (
    Claim,
    ClaimAuditEntry,
    ClaimInput,
    ClaimStatus,
    StatusMode,
)
from claim_tracker.models.post import Comment, CommentInput, Post, PostInput
from claim_tracker.models.profile import MemberProfile, ProfileUpdate, RegistrationInput

__all__ = [
    "Caller",
    "Claim",
    "ClaimAuditEntry",
    "ClaimInput",
    "ClaimStatus",
    "Comment",
    "CommentInput",
    "MemberProfile",
    "Post",
    "PostInput",
    "ProfileUpdate",
    "RegistrationInput",
    "Role",
    "StatusMode",
]
