"""Wiring: one store, one upstream caller, the gateways and every service."""

from dataclasses import dataclass
from typing import Optional

from claim_tracker.db.store import RecordStore
from claim_tracker.gateways.identity import IdentityGateway, LocalIdentityGateway
from claim_tracker.gateways.storage import DocumentStorage, LocalDocumentStorage
from claim_tracker.services import (
    AccessGate,
    ClaimService,
    MemberService,
    PostService,
    SessionController,
    StatsService,
)
from claim_tracker.utils.retry import UpstreamCaller


@dataclass
class ClaimTrackerApp:
    store: RecordStore
    upstream: UpstreamCaller
    identity: IdentityGateway
    storage: DocumentStorage
    gate: AccessGate
    members: MemberService
    sessions: SessionController
    claims: ClaimService
    posts: PostService
    stats: StatsService


def build_app(
    db_path: Optional[str] = None,
    upload_dir: Optional[str] = None,
    timeout: Optional[float] = None,
    upstream: Optional[UpstreamCaller] = None,
    identity: Optional[IdentityGateway] = None,
    storage: Optional[DocumentStorage] = None,
) -> ClaimTrackerApp:
    """Build the application against a SQLite database (CLAIMS_DB_PATH by default)."""
    store = RecordStore(db_path)
    upstream = upstream or UpstreamCaller(timeout=timeout)
    identity = identity or LocalIdentityGateway(store)
    storage = storage or LocalDocumentStorage(upload_dir)
    gate = AccessGate(store, upstream)
    members = MemberService(store, upstream, identity, gate)
    return ClaimTrackerApp(
        store=store,
        upstream=upstream,
        identity=identity,
        storage=storage,
        gate=gate,
        members=members,
        sessions=SessionController(store, upstream, identity, gate, members),
        claims=ClaimService(store, upstream, gate, storage),
        posts=PostService(store, upstream, gate),
        stats=StatsService(store, upstream, gate),
    )
