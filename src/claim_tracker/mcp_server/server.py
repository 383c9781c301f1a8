"""MCP server exposing the claim-tracker operations via stdio transport.

The server holds one session (like a browser client): sign in with
``sign_in_with_car_number`` or ``sign_in_admin``, then call the other tools.
Every tool returns JSON; failures come back as ``{"error": <code>, "message": ...}``.
"""

import json
from typing import Any, Callable, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel

from claim_tracker.app import ClaimTrackerApp, build_app
from claim_tracker.exceptions import ClaimTrackerError
from claim_tracker.observability import get_logger

logger = get_logger(__name__)

mcp = FastMCP("claim-tracker", json_response=True)

_app: Optional[ClaimTrackerApp] = None


def get_app() -> ClaimTrackerApp:
    global _app
    if _app is None:
        _app = build_app()
    return _app


def set_app(app: Optional[ClaimTrackerApp]) -> None:
    """Replace the application (tests point it at a temporary database)."""
    global _app
    _app = app


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude={"password"})
    if isinstance(value, list):
        return [_dump(v) for v in value]
    return value


def _respond(action: Callable[[ClaimTrackerApp], Any]) -> str:
    try:
        result = action(get_app())
    except ClaimTrackerError as e:
        return json.dumps(e.to_dict())
    return json.dumps(_dump(result), default=str)


def _caller(app: ClaimTrackerApp):
    return app.sessions.current_caller()


# ============================================================================
# AUTH
# ============================================================================


@mcp.tool()
def sign_in_with_car_number(car_number: str, password: str) -> str:
    """Sign a member in with their car number and password."""
    return _respond(lambda app: app.sessions.sign_in_with_car_number(car_number, password))


@mcp.tool()
def sign_in_admin(email: str, password: str) -> str:
    """Sign an administrator in with email and password."""
    return _respond(lambda app: app.sessions.sign_in_admin(email, password))


@mcp.tool()
def sign_up(
    full_name: str,
    car_number: str,
    phone_number: str,
    password: str,
    insurance_start_date: str,
    insurance_end_date: str,
    profile_picture_url: str | None = None,
    drivers_license_url: str | None = None,
) -> str:
    """Register a new (unverified) member and sign them in."""
    fields = {
        "full_name": full_name,
        "car_number": car_number,
        "phone_number": phone_number,
        "password": password,
        "insurance_start_date": insurance_start_date,
        "insurance_end_date": insurance_end_date,
        "profile_picture_url": profile_picture_url,
        "drivers_license_url": drivers_license_url,
    }
    return _respond(lambda app: app.sessions.sign_up(fields))


@mcp.tool()
def sign_out() -> str:
    """Close the current session."""
    def action(app: ClaimTrackerApp) -> dict:
        app.sessions.sign_out()
        return {"signed_out": True}

    return _respond(action)


@mcp.tool()
def update_profile(
    full_name: str | None = None,
    phone_number: str | None = None,
    insurance_start_date: str | None = None,
    insurance_end_date: str | None = None,
    profile_picture_url: str | None = None,
    drivers_license_url: str | None = None,
) -> str:
    """Edit the signed-in member's contact and insurance-window fields."""
    changes = {
        key: value
        for key, value in {
            "full_name": full_name,
            "phone_number": phone_number,
            "insurance_start_date": insurance_start_date,
            "insurance_end_date": insurance_end_date,
            "profile_picture_url": profile_picture_url,
            "drivers_license_url": drivers_license_url,
        }.items()
        if value is not None
    }
    return _respond(lambda app: app.members.update_profile(_caller(app), changes))


# ============================================================================
# CLAIMS
# ============================================================================


@mcp.tool()
def submit_claim(
    accident_date: str,
    description: str,
    insurance_receipt_url: str,
    police_report_url: str,
    accident_photo_1_url: str | None = None,
    accident_photo_2_url: str | None = None,
) -> str:
    """Submit an accident claim (verified members only)."""
    claim_input = {
        "accident_date": accident_date,
        "description": description,
        "insurance_receipt_url": insurance_receipt_url,
        "police_report_url": police_report_url,
        "accident_photos": [p for p in (accident_photo_1_url, accident_photo_2_url) if p],
    }
    return _respond(lambda app: app.claims.submit_claim(_caller(app), claim_input))


@mcp.tool()
def list_claims() -> str:
    """Claims visible to the caller (all for administrators), newest first."""
    return _respond(lambda app: app.claims.list_claims(_caller(app)))


@mcp.tool()
def list_own_claims() -> str:
    """The caller's own claims, newest first."""
    return _respond(lambda app: app.claims.list_own_claims(_caller(app)))


@mcp.tool()
def get_claim_history(claim_ref: str) -> str:
    """Audit log of a claim (by id or claim number)."""
    return _respond(lambda app: app.claims.get_claim_history(_caller(app), claim_ref))


@mcp.tool()
def update_claim_progress(
    claim_ref: str,
    progress: int,
    status: str | None = None,
    resume_automatic: bool = False,
) -> str:
    """Set a claim's progress (0-100); status follows progress unless status="rejected"."""
    return _respond(
        lambda app: app.claims.update_claim_progress(
            _caller(app), claim_ref, progress, explicit_status=status, resume_automatic=resume_automatic
        )
    )


# ============================================================================
# CONTENT
# ============================================================================


@mcp.tool()
def list_posts() -> str:
    """Announcements, newest first."""
    return _respond(lambda app: app.posts.list_posts())


@mcp.tool()
def create_post(title: str, content: str, media_url: str | None = None, media_type: str | None = None) -> str:
    """Publish an announcement (administrators only)."""
    post = {"title": title, "content": content, "media_url": media_url, "media_type": media_type}
    return _respond(lambda app: app.posts.create_post(_caller(app), post))


@mcp.tool()
def update_post(
    post_id: str, title: str, content: str, media_url: str | None = None, media_type: str | None = None
) -> str:
    """Edit an announcement (administrators only)."""
    post = {"title": title, "content": content, "media_url": media_url, "media_type": media_type}
    return _respond(lambda app: app.posts.update_post(_caller(app), post_id, post))


@mcp.tool()
def delete_post(post_id: str) -> str:
    """Delete an announcement and its comments (administrators only)."""
    return _respond(lambda app: {"deleted": app.posts.delete_post(_caller(app), post_id)})


@mcp.tool()
def list_comments(post_id: str) -> str:
    """Comments on an announcement, newest first."""
    return _respond(lambda app: app.posts.list_comments(post_id))


@mcp.tool()
def add_comment(post_id: str, content: str) -> str:
    """Comment on an announcement (any signed-in user)."""
    return _respond(lambda app: app.posts.add_comment(_caller(app), post_id, content))


# ============================================================================
# ADMIN
# ============================================================================


@mcp.tool()
def list_members(verification: str = "all", search: str | None = None) -> str:
    """Registered members, newest first; verification is all, verified or unverified."""
    return _respond(lambda app: app.members.list_members(_caller(app), verification, search))


@mcp.tool()
def verify_member(member_id: str) -> str:
    """Mark a member as verified (idempotent)."""
    return _respond(lambda app: app.members.verify_member(_caller(app), member_id))


@mcp.tool()
def get_dashboard_stats() -> str:
    """Administrator dashboard counts."""
    return _respond(lambda app: app.stats.dashboard_stats(_caller(app)))


@mcp.tool()
def get_public_stats() -> str:
    """Home-page counts (no sign-in required)."""
    return _respond(lambda app: app.stats.public_stats())


def main() -> None:
    """Run the MCP server with stdio transport (default)."""
    logger.info("Starting claim-tracker MCP server")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
