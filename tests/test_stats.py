"""Tests for dashboard statistics."""

import pytest

from conftest import claim_fields

from claim_tracker.exceptions import Forbidden


def test_dashboard_stats(app, admin, make_member):
    alice = make_member("AAA111")
    make_member("BBB222", verified=False)
    make_member("CCC333")
    first = app.claims.submit_claim(alice, claim_fields())
    second = app.claims.submit_claim(alice, claim_fields(description="second"))
    app.claims.submit_claim(alice, claim_fields(description="third"))
    app.claims.update_claim_progress(admin, first.id, 100)
    app.claims.update_claim_progress(admin, second.id, 10, explicit_status="rejected")
    app.posts.create_post(admin, {"title": "t", "content": "c"})

    stats = app.stats.dashboard_stats(admin)
    assert stats["members"] == 3
    assert stats["verified_members"] == 2
    assert stats["unverified_members"] == 1
    assert stats["verification_rate"] == 67
    assert stats["claims"] == 3
    assert stats["claims_by_status"] == {
        "submitted": 1,
        "under_review": 0,
        "processing": 0,
        "completed": 1,
        "rejected": 1,
    }
    assert stats["open_claims"] == 2
    assert stats["posts"] == 1


def test_dashboard_stats_empty(app, admin):
    stats = app.stats.dashboard_stats(admin)
    assert stats["members"] == 0
    assert stats["verification_rate"] == 0


def test_dashboard_stats_admin_only(app, member):
    with pytest.raises(Forbidden):
        app.stats.dashboard_stats(member)


def test_public_stats(app, admin, member):
    claim = app.claims.submit_claim(member, claim_fields())
    app.claims.update_claim_progress(admin, claim.id, 100)
    assert app.stats.public_stats() == {
        "members": 1,
        "claims": 1,
        "completed_claims": 1,
        "posts": 0,
    }
