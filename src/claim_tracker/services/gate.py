"""Role and verification gate: the single authorization chokepoint.

Capability matrix:

    action                  anonymous  unverified  verified  admin
    view posts                 yes        yes        yes      yes
    view claims (own)          no         no         yes      yes (all)
    comment on post            no         yes        yes      yes
    submit claim               no         no         yes      no
    verify member              no         no         no       yes
    create/edit/delete post    no         no         no       yes
    update claim progress      no         no         no       yes

Every gated service call first refreshes the caller from the stored profile
(``AccessGate.resolve``), so a decision is never reused across calls.
"""

from typing import Optional

from claim_tracker.exceptions import Forbidden, NotVerified, Unauthenticated
from claim_tracker.models.caller import Caller
from claim_tracker.models.profile import MemberProfile
from claim_tracker.observability import get_logger
from claim_tracker.services.base import BaseService

logger = get_logger(__name__)


def _deny(error: Exception, caller: Caller, action: str) -> None:
    logger.warning("Denied %s for %s: %s", action, caller.describe(), error)
    raise error


def require_authenticated(caller: Caller, action: str = "operation") -> Caller:
    if not caller.is_authenticated:
        _deny(Unauthenticated(f"Sign in required to {action}"), caller, action)
    return caller


def require_admin(caller: Caller, action: str = "operation") -> Caller:
    require_authenticated(caller, action)
    if not caller.is_admin:
        _deny(Forbidden(f"Administrator rights required to {action}"), caller, action)
    return caller


def require_verified(caller: Caller, action: str = "operation") -> Caller:
    """Authenticated and verified. Administrators are exempt from verification."""
    require_authenticated(caller, action)
    if not caller.is_admin and not caller.is_verified:
        _deny(NotVerified(f"Account must be verified to {action}"), caller, action)
    return caller


def require_member(caller: Caller, action: str = "operation") -> Caller:
    """Authenticated non-administrator (e.g. claim submission)."""
    require_authenticated(caller, action)
    if caller.is_admin:
        _deny(Forbidden(f"Administrators cannot {action}"), caller, action)
    return caller


def require_owner_or_admin(caller: Caller, owner_id: str, action: str = "operation") -> Caller:
    require_authenticated(caller, action)
    if not caller.is_admin and caller.user_id != owner_id:
        _deny(Forbidden(f"Not allowed to {action}"), caller, action)
    return caller


class AccessGate(BaseService):
    """Re-derives a caller's role and verification from the store on every call."""

    def load_profile(self, user_id: str, timeout: Optional[float] = None) -> Optional[MemberProfile]:
        row = self._find("profiles", timeout=timeout, id=user_id)
        return MemberProfile.model_validate(row) if row else None

    def resolve(self, caller: Caller, timeout: Optional[float] = None) -> Caller:
        """Fresh Caller for the same user; anonymous if the profile no longer exists."""
        if not caller.is_authenticated:
            return Caller.anonymous()
        profile = self.load_profile(caller.user_id, timeout=timeout)
        if profile is None:
            return Caller.anonymous()
        return Caller.from_profile(profile)
