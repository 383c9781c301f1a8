"""Claim submission, listing and the administrator progress pipeline.

Concurrent progress updates to the same claim are last-writer-wins: no
version token is checked. Each claim write and its audit entry are stored in
one transaction.
"""

import logging
import uuid
from datetime import date
from typing import Any, Optional

from claim_tracker.config.settings import CLAIM_NUMBER_PREFIX
from claim_tracker.db.constants import ACTION_CREATED, ACTION_PROGRESS_UPDATED
from claim_tracker.db.store import RecordStore
from claim_tracker.exceptions import NotFound
from claim_tracker.gateways.storage import DocumentStorage
from claim_tracker.models.caller import Caller
from claim_tracker.models.claim import Claim, ClaimAuditEntry, ClaimInput, ClaimStatus, StatusMode
from claim_tracker.observability import claim_context, get_logger, log_claim_event
from claim_tracker.services.base import BaseService, parse_input
from claim_tracker.services.gate import (
    AccessGate,
    require_admin,
    require_authenticated,
    require_member,
    require_owner_or_admin,
    require_verified,
)
from claim_tracker.services.lifecycle import resolve_status, validate_progress
from claim_tracker.utils.retry import UpstreamCaller

logger = get_logger(__name__)


def claim_number_prefix(on: Optional[date] = None) -> str:
    """Prefix for the yearly claim sequence, e.g. "CLM-2025-"."""
    year = (on or date.today()).year
    return f"{CLAIM_NUMBER_PREFIX}-{year}-"


class ClaimService(BaseService):
    """Claim submission, listing, history and progress updates."""

    def __init__(
        self,
        store: RecordStore,
        upstream: UpstreamCaller,
        gate: AccessGate,
        storage: Optional[DocumentStorage] = None,
    ):
        super().__init__(store, upstream)
        self._gate = gate
        self._storage = storage

    def _load(self, claim_ref: str, timeout: Optional[float] = None) -> Claim:
        """Find a claim by id or by claim number."""
        row = self._find("claims", timeout=timeout, id=claim_ref)
        if row is None:
            row = self._find("claims", timeout=timeout, claim_number=claim_ref)
        if row is None:
            raise NotFound("claim", claim_ref)
        return Claim.model_validate(row)

    @staticmethod
    def _audit_entry(claim_id: str, action: str, actor_id: str, **changes: Any) -> tuple[str, dict[str, Any]]:
        """Audit row written in the same transaction as the claim change."""
        return "claim_audit_log", {"claim_id": claim_id, "action": action, "actor_id": actor_id, **changes}

    def upload_document(
        self, caller: Caller, data: bytes, filename: str, timeout: Optional[float] = None
    ) -> str:
        """Store a supporting document and return its reference."""
        require_authenticated(self._gate.resolve(caller, timeout=timeout), "upload documents")
        if self._storage is None:
            raise NotFound("document storage", "not configured")
        return self._call("storage:store_file", self._storage.store_file, data, filename, timeout=timeout)

    def submit_claim(
        self, caller: Caller, claim_input: ClaimInput | dict[str, Any], timeout: Optional[float] = None
    ) -> Claim:
        """Create a claim for a verified member: progress 0, status submitted.

        Raises:
            Unauthenticated: no session.
            Forbidden: administrators do not submit claims.
            NotVerified: member not yet verified.
            ValidationFailed: missing receipt/report, empty description, future date, too many photos.
        """
        require_authenticated(caller, "submit a claim")
        caller = self._gate.resolve(caller, timeout=timeout)
        require_member(caller, "submit a claim")
        require_verified(caller, "submit a claim")
        data = parse_input(ClaimInput, claim_input)

        photos = data.accident_photos + [None, None]
        record = {
            "id": str(uuid.uuid4()),
            "user_id": caller.user_id,
            "car_number": caller.car_number,
            "accident_date": data.accident_date.isoformat(),
            "description": data.description,
            "accident_photo_1_url": photos[0],
            "accident_photo_2_url": photos[1],
            "insurance_receipt_url": data.insurance_receipt_url,
            "police_report_url": data.police_report_url,
            "progress": 0,
            "status": ClaimStatus.SUBMITTED.value,
            "status_mode": StatusMode.AUTOMATIC.value,
        }
        row = self._call(
            "claims:insert",
            self._store.insert_sequenced,
            "claims",
            record,
            "claim_number",
            claim_number_prefix(),
            timeout=timeout,
            companion=self._audit_entry(
                record["id"],
                ACTION_CREATED,
                caller.user_id,
                new_status=record["status"],
                new_progress=record["progress"],
                details="Claim submitted",
            ),
        )
        claim = Claim.model_validate(row)
        with claim_context(claim_number=claim.claim_number, actor=caller.describe()):
            log_claim_event(
                logger, "claim_submitted", claim_number=claim.claim_number, car_number=claim.car_number
            )
        return claim

    def list_claims(self, caller: Caller, timeout: Optional[float] = None) -> list[Claim]:
        """Administrators get every claim; members get their own. Newest first, unpaginated."""
        caller = require_verified(self._gate.resolve(caller, timeout=timeout), "view claims")
        if caller.is_admin:
            rows = self._list("claims", timeout=timeout)
        else:
            rows = self._list("claims", timeout=timeout, user_id=caller.user_id)
        return [Claim.model_validate(r) for r in rows]

    def list_own_claims(self, caller: Caller, timeout: Optional[float] = None) -> list[Claim]:
        caller = require_verified(self._gate.resolve(caller, timeout=timeout), "view claims")
        rows = self._list("claims", timeout=timeout, user_id=caller.user_id)
        return [Claim.model_validate(r) for r in rows]

    def get_claim(self, caller: Caller, claim_ref: str, timeout: Optional[float] = None) -> Claim:
        caller = require_verified(self._gate.resolve(caller, timeout=timeout), "view claims")
        claim = self._load(claim_ref, timeout=timeout)
        require_owner_or_admin(caller, claim.user_id, "view this claim")
        return claim

    def get_claim_history(
        self, caller: Caller, claim_ref: str, timeout: Optional[float] = None
    ) -> list[ClaimAuditEntry]:
        """Audit entries for a claim, oldest first."""
        claim = self.get_claim(caller, claim_ref, timeout=timeout)
        rows = self._call(
            "list:claim_audit_log",
            self._store.list,
            "claim_audit_log",
            timeout=timeout,
            order_by="id",
            descending=False,
            claim_id=claim.id,
        )
        return [ClaimAuditEntry.model_validate(r) for r in rows]

    def update_claim_progress(
        self,
        caller: Caller,
        claim_ref: str,
        new_progress: int,
        explicit_status: Optional[str] = None,
        resume_automatic: bool = False,
        timeout: Optional[float] = None,
    ) -> Claim:
        """Admin-only progress update; status recomputed per the progress bands.

        ``explicit_status="rejected"`` pins the claim (MANUAL mode); while pinned,
        progress updates leave status alone unless ``resume_automatic`` is set.

        Raises:
            Forbidden: caller is not an administrator (even if they own the claim).
            NotFound: unknown claim.
            ValidationFailed: progress outside [0, 100] or status inconsistent with progress.
        """
        caller = require_admin(self._gate.resolve(caller, timeout=timeout), "update claim progress")
        progress = validate_progress(new_progress)
        claim = self._load(claim_ref, timeout=timeout)
        status, mode = resolve_status(
            claim.status_mode, claim.status, progress, explicit_status, resume_automatic
        )

        with claim_context(claim_number=claim.claim_number, actor=caller.describe()):
            if claim.is_terminal and status != claim.status:
                logger.warning(
                    "Reopening %s claim %s as %s", claim.status.value, claim.claim_number, status.value
                )
            row = self._call(
                "claims:update",
                self._store.update,
                "claims",
                claim.id,
                {"progress": progress, "status": status.value, "status_mode": mode.value},
                timeout=timeout,
                companion=self._audit_entry(
                    claim.id,
                    ACTION_PROGRESS_UPDATED,
                    caller.user_id,
                    old_status=claim.status.value,
                    new_status=status.value,
                    old_progress=claim.progress,
                    new_progress=progress,
                    details=f"mode={mode.value}",
                ),
            )
            if row is None:
                raise NotFound("claim", claim_ref)
            updated = Claim.model_validate(row)
            log_claim_event(
                logger,
                "claim_progress_updated",
                claim_number=claim.claim_number,
                level=logging.INFO,
                progress=updated.progress,
                status=updated.status.value,
            )
        return updated
