"""Unit tests for CLI (main.py) commands and argument handling."""

import json
import sys

import pytest

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD, claim_fields

from claim_tracker.main import _usage, main


@pytest.fixture
def admin_env(monkeypatch):
    monkeypatch.setenv("CLAIM_TRACKER_ADMIN_EMAIL", ADMIN_EMAIL)
    monkeypatch.setenv("CLAIM_TRACKER_ADMIN_PASSWORD", ADMIN_PASSWORD)


def _run(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["claim-tracker", *args])
    main()


class TestUsage:
    def test_usage_lists_commands(self):
        result = _usage()
        for command in ("init-db", "bootstrap-admin", "members", "verify", "progress", "stats"):
            assert command in result


class TestMain:
    def test_no_arguments_prints_usage(self, monkeypatch, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch)
        assert exc_info.value.code == 1
        assert "Usage:" in capsys.readouterr().err

    def test_unknown_command(self, monkeypatch, capsys, admin_env):
        with pytest.raises(SystemExit):
            _run(monkeypatch, "frobnicate")
        assert "Unknown command: frobnicate" in capsys.readouterr().err

    def test_init_db(self, monkeypatch, capsys, tmp_path):
        path = tmp_path / "fresh" / "claims.db"
        monkeypatch.setenv("CLAIMS_DB_PATH", str(path))
        _run(monkeypatch, "init-db")
        assert path.exists()
        assert str(path) in capsys.readouterr().out

    def test_bootstrap_admin(self, monkeypatch, capsys, admin_env):
        _run(monkeypatch, "bootstrap-admin")
        data = json.loads(capsys.readouterr().out)
        assert data["car_number"] == "ADMIN001"
        assert data["is_admin"] is True

    def test_admin_command_requires_credentials(self, monkeypatch, capsys):
        monkeypatch.delenv("CLAIM_TRACKER_ADMIN_EMAIL", raising=False)
        monkeypatch.delenv("CLAIM_TRACKER_ADMIN_PASSWORD", raising=False)
        with pytest.raises(SystemExit):
            _run(monkeypatch, "stats")
        assert "must be set" in capsys.readouterr().err

    def test_verify_and_list_members(self, monkeypatch, capsys, app, admin, unverified_member, admin_env):
        _run(monkeypatch, "verify", "5678XYZ")
        assert json.loads(capsys.readouterr().out)["is_verified"] is True

        _run(monkeypatch, "members", "verified")
        members = json.loads(capsys.readouterr().out)
        assert [m["car_number"] for m in members] == ["5678XYZ"]

    def test_verify_unknown_member(self, monkeypatch, capsys, admin, admin_env):
        with pytest.raises(SystemExit):
            _run(monkeypatch, "verify", "NOPE99")
        assert "Member not found: NOPE99" in capsys.readouterr().err

    def test_progress_and_history(self, monkeypatch, capsys, app, admin, member, admin_env):
        claim = app.claims.submit_claim(member, claim_fields())

        _run(monkeypatch, "progress", claim.claim_number, "80")
        data = json.loads(capsys.readouterr().out)
        assert data["progress"] == 80
        assert data["status"] == "processing"

        _run(monkeypatch, "progress", claim.claim_number, "80", "--reject")
        assert json.loads(capsys.readouterr().out)["status"] == "rejected"

        _run(monkeypatch, "history", claim.claim_number)
        history = json.loads(capsys.readouterr().out)
        assert [h["action"] for h in history] == ["created", "progress_updated", "progress_updated"]

    def test_progress_rejects_out_of_range(self, monkeypatch, capsys, app, admin, member, admin_env):
        claim = app.claims.submit_claim(member, claim_fields())
        with pytest.raises(SystemExit):
            _run(monkeypatch, "progress", claim.claim_number, "150")
        assert "validation_failed" in capsys.readouterr().err

    def test_progress_requires_integer(self, monkeypatch, capsys, admin, admin_env):
        with pytest.raises(SystemExit):
            _run(monkeypatch, "progress", "CLM-2025-00001", "half")
        assert "Progress must be an integer" in capsys.readouterr().err

    def test_stats(self, monkeypatch, capsys, admin, member, admin_env):
        _run(monkeypatch, "stats")
        data = json.loads(capsys.readouterr().out)
        assert data["members"] == 1
        assert data["verified_members"] == 1
