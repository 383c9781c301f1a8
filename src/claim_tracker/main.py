"""CLI entry point for claim-tracker administration.

Admin commands sign in with CLAIM_TRACKER_ADMIN_EMAIL / CLAIM_TRACKER_ADMIN_PASSWORD.
"""

import json
import logging
import os
import sys

from claim_tracker.exceptions import ClaimTrackerError


def _setup_logging() -> None:
    """Configure logging for CLI usage."""
    from claim_tracker.observability import get_logger

    get_logger("claim_tracker")
    logging.getLogger("claim_tracker").setLevel(
        logging.DEBUG if "--debug" in sys.argv else logging.INFO
    )


def _usage() -> str:
    return """Usage:
  claim-tracker init-db                         Create the database schema
  claim-tracker bootstrap-admin                 Create the administrator account
  claim-tracker members [verified|unverified]   List members
  claim-tracker verify <car_number>             Verify a member
  claim-tracker claims                          List all claims
  claim-tracker claim <claim_number>            Show one claim
  claim-tracker history <claim_number>          Show a claim's audit log
  claim-tracker progress <claim_number> <0-100> Update claim progress
  claim-tracker stats                           Dashboard statistics

Options:
  --reject                           With progress: mark the claim rejected
  --resume-auto                      With progress: status follows progress again
  --debug                            Enable debug logging
  --json                             Use JSON log format
"""


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _print(value) -> None:
    from pydantic import BaseModel

    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    elif isinstance(value, list):
        value = [v.model_dump(mode="json") if isinstance(v, BaseModel) else v for v in value]
    print(json.dumps(value, indent=2, default=str))


def _admin_caller(app):
    """Sign in as the configured administrator and return the Caller."""
    from claim_tracker.config.settings import get_admin_email, get_admin_password

    email, password = get_admin_email(), get_admin_password()
    if not email or not password:
        _fail("CLAIM_TRACKER_ADMIN_EMAIL and CLAIM_TRACKER_ADMIN_PASSWORD must be set")
    app.sessions.sign_in_admin(email, password)
    return app.sessions.current_caller()


def cmd_init_db() -> None:
    from claim_tracker.db.database import get_db_path, init_db

    init_db()
    print(f"Initialized {get_db_path()}")


def cmd_bootstrap_admin(app) -> None:
    from claim_tracker.config.settings import get_admin_email, get_admin_password

    email, password = get_admin_email(), get_admin_password()
    if not email or not password:
        _fail("CLAIM_TRACKER_ADMIN_EMAIL and CLAIM_TRACKER_ADMIN_PASSWORD must be set")
    _print(app.sessions.bootstrap_admin(email, password))


def cmd_members(app, verification: str = "all") -> None:
    _print(app.members.list_members(_admin_caller(app), verification))


def cmd_verify(app, car_number: str) -> None:
    caller = _admin_caller(app)
    member = app.members.find_by_car_number(car_number)
    if member is None:
        _fail(f"Member not found: {car_number}")
    _print(app.members.verify_member(caller, member.id))


def cmd_claims(app) -> None:
    _print(app.claims.list_claims(_admin_caller(app)))


def cmd_claim(app, claim_ref: str) -> None:
    _print(app.claims.get_claim(_admin_caller(app), claim_ref))


def cmd_history(app, claim_ref: str) -> None:
    _print(app.claims.get_claim_history(_admin_caller(app), claim_ref))


def cmd_progress(app, claim_ref: str, raw_progress: str, reject: bool, resume_auto: bool) -> None:
    try:
        progress = int(raw_progress)
    except ValueError:
        _fail(f"Progress must be an integer: {raw_progress}")
    claim = app.claims.update_claim_progress(
        _admin_caller(app),
        claim_ref,
        progress,
        explicit_status="rejected" if reject else None,
        resume_automatic=resume_auto,
    )
    _print(claim)


def cmd_stats(app) -> None:
    _print(app.stats.dashboard_stats(_admin_caller(app)))


def main() -> None:
    """Run an administration command."""
    argv = [arg for arg in sys.argv[1:] if not arg.startswith("--")]
    options = [arg for arg in sys.argv[1:] if arg.startswith("--")]

    if "--json" in options:
        os.environ["CLAIM_TRACKER_LOG_FORMAT"] = "json"
    if "--debug" in options:
        os.environ["CLAIM_TRACKER_LOG_LEVEL"] = "DEBUG"

    _setup_logging()

    if not argv:
        print(_usage(), file=sys.stderr)
        sys.exit(1)

    first = argv[0].lower()
    if first == "init-db":
        cmd_init_db()
        return

    from claim_tracker.app import build_app

    app = build_app()
    try:
        if first == "bootstrap-admin":
            cmd_bootstrap_admin(app)
        elif first == "members":
            cmd_members(app, argv[1] if len(argv) > 1 else "all")
        elif first == "claims":
            cmd_claims(app)
        elif first == "stats":
            cmd_stats(app)
        elif first in ("verify", "claim", "history"):
            if len(argv) < 2:
                print(f"Error: {first} requires an argument", file=sys.stderr)
                print(_usage(), file=sys.stderr)
                sys.exit(1)
            {"verify": cmd_verify, "claim": cmd_claim, "history": cmd_history}[first](app, argv[1])
        elif first == "progress":
            if len(argv) < 3:
                print("Error: progress requires <claim_number> <0-100>", file=sys.stderr)
                print(_usage(), file=sys.stderr)
                sys.exit(1)
            cmd_progress(app, argv[1], argv[2], "--reject" in options, "--resume-auto" in options)
        else:
            print(f"Error: Unknown command: {first}", file=sys.stderr)
            print(_usage(), file=sys.stderr)
            sys.exit(1)
    except ClaimTrackerError as e:
        _fail(f"{e.code}: {e.message}")
    finally:
        app.sessions.sign_out()


if __name__ == "__main__":
    main()
