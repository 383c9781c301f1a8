"""Tests for the role and verification gate."""

import pytest

from claim_tracker.exceptions import Forbidden, NotVerified, Unauthenticated
from claim_tracker.models.caller import Caller, Role
from claim_tracker.services.gate import (
    require_admin,
    require_authenticated,
    require_member,
    require_owner_or_admin,
    require_verified,
)

ANON = Caller.anonymous()
UNVERIFIED = Caller(user_id="u1", role=Role.MEMBER, is_verified=False, car_number="1")
VERIFIED = Caller(user_id="u2", role=Role.MEMBER, is_verified=True, car_number="2")
ADMIN = Caller(user_id="a1", role=Role.ADMIN, is_verified=False, car_number="ADMIN001")


class TestRequireFunctions:
    def test_authenticated(self):
        with pytest.raises(Unauthenticated):
            require_authenticated(ANON)
        for caller in (UNVERIFIED, VERIFIED, ADMIN):
            assert require_authenticated(caller) is caller

    def test_verified(self):
        with pytest.raises(Unauthenticated):
            require_verified(ANON)
        with pytest.raises(NotVerified):
            require_verified(UNVERIFIED)
        assert require_verified(VERIFIED) is VERIFIED

    def test_admins_exempt_from_verification(self):
        assert require_verified(ADMIN) is ADMIN

    def test_admin(self):
        with pytest.raises(Unauthenticated):
            require_admin(ANON)
        for caller in (UNVERIFIED, VERIFIED):
            with pytest.raises(Forbidden):
                require_admin(caller)
        assert require_admin(ADMIN) is ADMIN

    def test_member_excludes_admin(self):
        with pytest.raises(Forbidden):
            require_member(ADMIN)
        assert require_member(VERIFIED) is VERIFIED

    def test_owner_or_admin(self):
        assert require_owner_or_admin(VERIFIED, "u2") is VERIFIED
        assert require_owner_or_admin(ADMIN, "u2") is ADMIN
        with pytest.raises(Forbidden):
            require_owner_or_admin(UNVERIFIED, "u2")


def test_caller_with_role_but_no_user_is_anonymous():
    assert not Caller(role=Role.ADMIN).is_authenticated


def test_caller_describe():
    assert ANON.describe() == "anonymous"
    assert ADMIN.describe() == "admin:a1"


class TestAccessGateResolve:
    def test_resolve_reflects_verification_after_it_happens(self, app, admin, unverified_member):
        """A Caller built before verification is refreshed on the next call."""
        assert not app.gate.resolve(unverified_member).is_verified
        app.members.verify_member(admin, unverified_member.user_id)
        assert app.gate.resolve(unverified_member).is_verified

    def test_resolve_cannot_be_escalated_by_forged_role(self, app, member):
        forged = member.model_copy(update={"role": Role.ADMIN})
        assert app.gate.resolve(forged).role == Role.MEMBER

    def test_resolve_unknown_user_is_anonymous(self, app):
        ghost = Caller(user_id="missing", role=Role.MEMBER, is_verified=True)
        assert app.gate.resolve(ghost) == Caller.anonymous()
