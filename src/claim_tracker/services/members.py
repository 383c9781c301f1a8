"""Member registration, verification and profile management."""

from typing import Any, Optional

from claim_tracker.config.settings import get_email_domain
from claim_tracker.db.store import RecordStore
from claim_tracker.exceptions import (
    ClaimTrackerError,
    DuplicateCarNumber,
    NotFound,
    UpstreamTimeout,
    UpstreamUnavailable,
    ValidationFailed,
)
from claim_tracker.gateways.identity import IdentityGateway
from claim_tracker.models.caller import Caller
from claim_tracker.models.profile import MemberProfile, ProfileUpdate, RegistrationInput
from claim_tracker.observability import get_logger, log_claim_event
from claim_tracker.services.base import BaseService, parse_input
from claim_tracker.services.gate import AccessGate, require_admin, require_authenticated
from claim_tracker.utils.retry import UpstreamCaller
from claim_tracker.utils.sanitization import car_number_slug

logger = get_logger(__name__)

VERIFICATION_FILTERS = ("all", "verified", "unverified")


def member_email(car_number: str) -> str:
    """Synthetic login email for a car number: "1234 ABC" -> "1234abc@<domain>"."""
    slug = car_number_slug(car_number)
    if not slug:
        raise ValidationFailed("car_number", "car number must contain letters or digits")
    return f"{slug}@{get_email_domain()}"


class MemberService(BaseService):
    """registerMember, verifyMember, listMembers and profile edits."""

    def __init__(
        self,
        store: RecordStore,
        upstream: UpstreamCaller,
        identity: IdentityGateway,
        gate: AccessGate,
    ):
        super().__init__(store, upstream)
        self._identity = identity
        self._gate = gate

    def _get_profile(self, member_id: str, timeout: Optional[float] = None) -> MemberProfile:
        profile = self._gate.load_profile(member_id, timeout=timeout)
        if profile is None:
            raise NotFound("member", member_id)
        return profile

    def find_by_car_number(self, car_number: str, timeout: Optional[float] = None) -> Optional[MemberProfile]:
        row = self._find("profiles", timeout=timeout, car_number=car_number.strip())
        return MemberProfile.model_validate(row) if row else None

    def register_member(self, fields: RegistrationInput | dict[str, Any], timeout: Optional[float] = None) -> MemberProfile:
        """Create an unverified member profile and its login identity.

        Raises:
            ValidationFailed: missing name/phone/car number, short password, bad dates.
            DuplicateCarNumber: car number (or its synthetic email) already taken.
        """
        data = parse_input(RegistrationInput, fields)
        email = member_email(data.car_number)

        if self.find_by_car_number(data.car_number, timeout=timeout) is not None:
            logger.info("Registration rejected: car number %s already registered", data.car_number)
            raise DuplicateCarNumber(data.car_number)

        identity = self._call(
            "identity:create",
            self._identity.create_identity,
            email,
            data.password,
            {"full_name": data.full_name, "car_number": data.car_number},
            timeout=timeout,
            on_conflict=DuplicateCarNumber(data.car_number),
        )

        record = {
            "id": identity.id,
            "email": email,
            "full_name": data.full_name,
            "car_number": data.car_number,
            "phone_number": data.phone_number,
            "profile_picture_url": data.profile_picture_url,
            "drivers_license_url": data.drivers_license_url,
            "insurance_start_date": data.insurance_start_date.isoformat(),
            "insurance_end_date": data.insurance_end_date.isoformat(),
            "is_verified": False,
            "is_admin": False,
        }
        try:
            row = self._call(
                "profiles:insert",
                self._store.insert,
                "profiles",
                record,
                timeout=timeout,
                on_conflict=DuplicateCarNumber(data.car_number),
            )
        except ClaimTrackerError:
            # Undo the identity so the car number can register again later.
            try:
                self._call("identity:delete", self._identity.delete_identity, identity.id, timeout=timeout)
            except (UpstreamUnavailable, UpstreamTimeout):
                logger.exception("Could not remove identity %s after failed sign-up", identity.id)
            raise

        profile = MemberProfile.model_validate(row)
        log_claim_event(logger, "member_registered", member_id=profile.id, car_number=profile.car_number)
        return profile

    def verify_member(self, caller: Caller, member_id: str, timeout: Optional[float] = None) -> MemberProfile:
        """Admin-only; idempotent: verifying a verified member is a no-op success."""
        caller = require_admin(self._gate.resolve(caller, timeout=timeout), "verify members")
        profile = self._get_profile(member_id, timeout=timeout)
        if profile.is_verified:
            logger.debug("Member %s already verified", member_id)
            return profile
        row = self._call(
            "profiles:update", self._store.update, "profiles", member_id, {"is_verified": True}, timeout=timeout
        )
        if row is None:
            raise NotFound("member", member_id)
        log_claim_event(logger, "member_verified", member_id=member_id, verified_by=caller.user_id)
        return MemberProfile.model_validate(row)

    def list_members(
        self,
        caller: Caller,
        verification: str = "all",
        search: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> list[MemberProfile]:
        """Non-admin profiles, newest first, optionally filtered by verification state and text."""
        require_admin(self._gate.resolve(caller, timeout=timeout), "list members")
        verification = (verification or "all").strip().lower()
        if verification not in VERIFICATION_FILTERS:
            raise ValidationFailed("verification", f"Expected one of {', '.join(VERIFICATION_FILTERS)}")

        predicate: dict[str, Any] = {"is_admin": False}
        if verification != "all":
            predicate["is_verified"] = verification == "verified"
        rows = self._list("profiles", timeout=timeout, **predicate)
        members = [MemberProfile.model_validate(r) for r in rows]

        needle = (search or "").strip().lower()
        if needle:
            members = [
                m
                for m in members
                if needle in m.full_name.lower()
                or needle in m.car_number.lower()
                or needle in m.phone_number.lower()
            ]
        return members

    def get_profile(self, caller: Caller, timeout: Optional[float] = None) -> MemberProfile:
        caller = require_authenticated(self._gate.resolve(caller, timeout=timeout), "view profile")
        return self._get_profile(caller.user_id, timeout=timeout)

    def update_profile(
        self, caller: Caller, update: ProfileUpdate | dict[str, Any], timeout: Optional[float] = None
    ) -> MemberProfile:
        """Owner edits contact and insurance-window fields; applied as one record update."""
        caller = require_authenticated(self._gate.resolve(caller, timeout=timeout), "update profile")
        changes = parse_input(ProfileUpdate, update)
        patch = changes.to_patch()
        current = self._get_profile(caller.user_id, timeout=timeout)
        if not patch:
            return current

        start = patch.get("insurance_start_date", current.insurance_start_date)
        end = patch.get("insurance_end_date", current.insurance_end_date)
        if start and end and end < start:
            raise ValidationFailed("insurance_end_date", "insurance end date precedes start date")

        row = self._call("profiles:update", self._store.update, "profiles", caller.user_id, patch, timeout=timeout)
        if row is None:
            raise NotFound("member", caller.user_id)
        logger.info("Profile %s updated: %s", caller.user_id, ", ".join(sorted(patch)))
        return MemberProfile.model_validate(row)
