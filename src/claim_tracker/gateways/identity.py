"""Identity gateway: sign-up, sign-in and the current session.

The services only talk to ``IdentityGateway``. ``LocalIdentityGateway`` keeps
identities in the ``identities`` collection of the record store and holds the
current session in memory, the way a client SDK holds its session.
"""

import hashlib
import hmac
import json
import os
import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel, Field

from claim_tracker.db.store import RecordStore
from claim_tracker.exceptions import Unauthenticated

_PBKDF2_ITERATIONS = 120_000


class Identity(BaseModel):
    """An authenticated login identity (not the profile)."""

    id: str
    email: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class IdentityGateway(ABC):
    """Interface to the identity/session provider."""

    @abstractmethod
    def create_identity(
        self, identifier: str, secret: str, metadata: Optional[dict[str, Any]] = None
    ) -> Identity:
        """Register a new login identity."""

    @abstractmethod
    def create_session(self, identifier: str, secret: str) -> Identity:
        """Sign in; raises Unauthenticated on bad credentials."""

    @abstractmethod
    def get_current_session(self) -> Optional[Identity]:
        """Identity of the open session, or None."""

    @abstractmethod
    def destroy_session(self) -> None:
        """Sign out."""

    @abstractmethod
    def delete_identity(self, identity_id: str) -> None:
        """Remove an identity (used to undo a half-finished sign-up)."""


def hash_secret(secret: str, salt: Optional[bytes] = None) -> str:
    """PBKDF2-SHA256 hash encoded as ``<salt hex>$<digest hex>``."""
    salt = salt if salt is not None else os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", secret.encode("utf-8"), salt, _PBKDF2_ITERATIONS)
    return f"{salt.hex()}${digest.hex()}"


def verify_secret(secret: str, encoded: str) -> bool:
    try:
        salt_hex, _ = encoded.split("$", 1)
        salt = bytes.fromhex(salt_hex)
    except ValueError:
        return False
    return hmac.compare_digest(hash_secret(secret, salt), encoded)


class LocalIdentityGateway(IdentityGateway):
    """SQLite-backed identities with an in-memory current session."""

    def __init__(self, store: RecordStore):
        self._store = store
        self._current: Optional[Identity] = None

    @staticmethod
    def _to_identity(row: dict[str, Any]) -> Identity:
        metadata = json.loads(row["metadata"]) if row.get("metadata") else {}
        return Identity(id=row["id"], email=row["email"], metadata=metadata)

    def create_identity(
        self, identifier: str, secret: str, metadata: Optional[dict[str, Any]] = None
    ) -> Identity:
        row = self._store.insert(
            "identities",
            {
                "id": str(uuid.uuid4()),
                "email": identifier.strip().lower(),
                "password_hash": hash_secret(secret),
                "metadata": json.dumps(metadata or {}),
            },
        )
        return self._to_identity(row)

    def create_session(self, identifier: str, secret: str) -> Identity:
        row = self._store.find("identities", email=identifier.strip().lower())
        if row is None or not verify_secret(secret, row["password_hash"]):
            raise Unauthenticated("Invalid login credentials")
        self._current = self._to_identity(row)
        return self._current

    def get_current_session(self) -> Optional[Identity]:
        return self._current

    def destroy_session(self) -> None:
        self._current = None

    def delete_identity(self, identity_id: str) -> None:
        self._store.delete("identities", identity_id)
        if self._current is not None and self._current.id == identity_id:
            self._current = None
