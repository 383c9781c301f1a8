"""SQLite persistence for profiles, claims, posts and comments."""

from claim_tracker.db.database import get_connection, get_db_path, init_db
from claim_tracker.db.store import RecordStore, StoreConflict, StoreError, StoreUsageError

__all__ = [
    "RecordStore",
    "StoreConflict",
    "StoreError",
    "StoreUsageError",
    "get_connection",
    "get_db_path",
    "init_db",
]
