"""Dashboard and home-page statistics."""

from typing import Any, Optional

from claim_tracker.db.constants import CLAIM_STATUSES, STATUS_COMPLETED
from claim_tracker.models.caller import Caller
from claim_tracker.services.base import BaseService
from claim_tracker.services.gate import AccessGate, require_admin


class StatsService(BaseService):
    def __init__(self, store, upstream, gate: AccessGate):
        super().__init__(store, upstream)
        self._gate = gate

    def dashboard_stats(self, caller: Caller, timeout: Optional[float] = None) -> dict[str, Any]:
        """Administrator overview: members, verification rate, claims per status, posts."""
        require_admin(self._gate.resolve(caller, timeout=timeout), "view dashboard statistics")
        members = self._count("profiles", timeout=timeout, is_admin=False)
        verified = self._count("profiles", timeout=timeout, is_admin=False, is_verified=True)
        by_status = {
            status: self._count("claims", timeout=timeout, status=status)
            for status in CLAIM_STATUSES
        }
        total_claims = sum(by_status.values())
        return {
            "members": members,
            "verified_members": verified,
            "unverified_members": members - verified,
            "verification_rate": round(verified / members * 100) if members else 0,
            "claims": total_claims,
            "claims_by_status": by_status,
            "open_claims": total_claims - by_status[STATUS_COMPLETED],
            "posts": self._count("posts", timeout=timeout),
        }

    def public_stats(self, timeout: Optional[float] = None) -> dict[str, int]:
        """Counts shown on the home page; no sign-in required."""
        return {
            "members": self._count("profiles", timeout=timeout, is_admin=False),
            "claims": self._count("claims", timeout=timeout),
            "completed_claims": self._count("claims", timeout=timeout, status=STATUS_COMPLETED),
            "posts": self._count("posts", timeout=timeout),
        }
