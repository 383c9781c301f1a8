"""Session controller: sign-in, sign-up, sign-out and the current caller."""

from datetime import date, timedelta
from typing import Any, Optional

from claim_tracker.config.settings import (
    ADMIN_CAR_NUMBER,
    MIN_PASSWORD_LENGTH,
    get_admin_email,
)
from claim_tracker.db.store import RecordStore
from claim_tracker.exceptions import (
    ClaimTrackerError,
    Forbidden,
    NotFound,
    Unauthenticated,
    ValidationFailed,
)
from claim_tracker.gateways.identity import Identity, IdentityGateway
from claim_tracker.models.caller import Caller
from claim_tracker.models.profile import MemberProfile, RegistrationInput
from claim_tracker.observability import get_logger, log_claim_event
from claim_tracker.services.base import BaseService
from claim_tracker.services.gate import AccessGate
from claim_tracker.services.members import MemberService
from claim_tracker.utils.retry import UpstreamCaller

logger = get_logger(__name__)

ADMIN_DISPLAY_NAME = "System Administrator"


def _check_password(password: Optional[str]) -> str:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(
            "password", f"password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    return password


class SessionController(BaseService):
    """Holds the session through the identity gateway and turns it into a Caller."""

    def __init__(
        self,
        store: RecordStore,
        upstream: UpstreamCaller,
        identity: IdentityGateway,
        gate: AccessGate,
        members: MemberService,
    ):
        super().__init__(store, upstream)
        self._identity = identity
        self._gate = gate
        self._members = members

    def _open_session(self, email: str, password: str, timeout: Optional[float]) -> Identity:
        return self._call("identity:create_session", self._identity.create_session, email, password, timeout=timeout)

    def _drop_session(self, timeout: Optional[float]) -> None:
        self._call("identity:destroy_session", self._identity.destroy_session, timeout=timeout)

    def sign_in_with_car_number(
        self, car_number: str, password: str, timeout: Optional[float] = None
    ) -> MemberProfile:
        """Sign a member in with car number and password.

        Raises:
            ValidationFailed: blank car number or short password.
            NotFound: car number not registered.
            Unauthenticated: wrong password.
        """
        if not car_number or not car_number.strip():
            raise ValidationFailed("car_number", "car number is required")
        _check_password(password)

        profile = self._members.find_by_car_number(car_number, timeout=timeout)
        if profile is None:
            raise NotFound("member", car_number.strip())

        identity = self._open_session(profile.email, password, timeout)
        if identity.id != profile.id:
            self._drop_session(timeout)
            raise Unauthenticated("Session does not belong to this car number")
        logger.info("Member %s signed in", profile.car_number)
        return profile

    def sign_in_admin(self, email: str, password: str, timeout: Optional[float] = None) -> MemberProfile:
        """Sign in with an administrator email; non-admin sessions are closed again."""
        if not email or not email.strip():
            raise ValidationFailed("email", "email is required")
        identity = self._open_session(email, password or "", timeout)

        profile = self._gate.load_profile(identity.id, timeout=timeout)
        if profile is None and identity.email == get_admin_email():
            profile = self._ensure_admin_profile(identity, timeout)
        if profile is None or not profile.is_admin:
            self._drop_session(timeout)
            logger.warning("Non-admin %s attempted admin sign-in", identity.email)
            raise Forbidden("Administrator rights required")
        logger.info("Administrator %s signed in", identity.email)
        return profile

    def _ensure_admin_profile(self, identity: Identity, timeout: Optional[float]) -> MemberProfile:
        existing = self._members.find_by_car_number(ADMIN_CAR_NUMBER, timeout=timeout)
        if existing is not None:
            if existing.id != identity.id:
                raise Forbidden("Administrator profile belongs to another identity")
            return existing
        today = date.today()
        row = self._call(
            "profiles:insert",
            self._store.insert,
            "profiles",
            {
                "id": identity.id,
                "email": identity.email,
                "full_name": identity.metadata.get("full_name") or ADMIN_DISPLAY_NAME,
                "car_number": ADMIN_CAR_NUMBER,
                "phone_number": identity.metadata.get("phone_number", ""),
                "insurance_start_date": today.isoformat(),
                "insurance_end_date": (today + timedelta(days=365)).isoformat(),
                "is_verified": True,
                "is_admin": True,
            },
            timeout=timeout,
            on_conflict=Forbidden("Administrator profile already exists"),
        )
        log_claim_event(logger, "admin_provisioned", admin_id=identity.id)
        return MemberProfile.model_validate(row)

    def bootstrap_admin(
        self,
        email: str,
        password: str,
        full_name: str = ADMIN_DISPLAY_NAME,
        phone_number: str = "",
        timeout: Optional[float] = None,
    ) -> MemberProfile:
        """Create the administrator identity and profile for the configured admin email."""
        admin_email = get_admin_email()
        if admin_email is None or email.strip().lower() != admin_email:
            raise Forbidden("Email is not the configured administrator email")
        _check_password(password)
        try:
            identity = self._open_session(email, password, timeout)
        except Unauthenticated:
            identity = self._call(
                "identity:create",
                self._identity.create_identity,
                email,
                password,
                {"full_name": full_name, "phone_number": phone_number},
                timeout=timeout,
                on_conflict=Forbidden("Administrator identity exists with another password"),
            )
        try:
            profile = self._gate.load_profile(identity.id, timeout=timeout)
            return profile if profile is not None else self._ensure_admin_profile(identity, timeout)
        finally:
            self._drop_session(timeout)

    def sign_up(self, fields: RegistrationInput | dict[str, Any], timeout: Optional[float] = None) -> MemberProfile:
        """Register a member and open their session."""
        profile = self._members.register_member(fields, timeout=timeout)
        password = fields.password if isinstance(fields, RegistrationInput) else fields["password"]
        self._open_session(profile.email, password, timeout)
        return profile

    def sign_out(self, timeout: Optional[float] = None) -> None:
        """Close the session. Gateway failures are logged; the local session is gone either way."""
        try:
            self._drop_session(timeout)
        except ClaimTrackerError as e:
            logger.error("Sign-out failed at the identity gateway: %s", e)

    def current_caller(self, timeout: Optional[float] = None) -> Caller:
        """Caller for the open session, rebuilt from the stored profile on every call."""
        identity = self._call("identity:get_current_session", self._identity.get_current_session, timeout=timeout)
        if identity is None:
            return Caller.anonymous()
        profile = self._gate.load_profile(identity.id, timeout=timeout)
        if profile is None:
            return Caller.anonymous()
        return Caller.from_profile(profile)

    def current_profile(self, timeout: Optional[float] = None) -> Optional[MemberProfile]:
        caller = self.current_caller(timeout=timeout)
        if not caller.is_authenticated:
            return None
        return self._gate.load_profile(caller.user_id, timeout=timeout)
