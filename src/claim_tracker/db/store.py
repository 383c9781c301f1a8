"""Generic record store over SQLite: find, insert, update, delete, list.

Records are plain dicts. Predicates are column equality filters. Column names
are checked against the known schema so callers can never inject SQL through
keys.
"""

import sqlite3
from typing import Any

from claim_tracker.db.database import get_connection

COLLECTIONS: dict[str, tuple[str, ...]] = {
    "identities": ("id", "email", "password_hash", "metadata", "created_at"),
    "profiles": (
        "id",
        "email",
        "full_name",
        "car_number",
        "phone_number",
        "profile_picture_url",
        "drivers_license_url",
        "insurance_start_date",
        "insurance_end_date",
        "is_verified",
        "is_admin",
        "created_at",
        "updated_at",
    ),
    "claims": (
        "id",
        "claim_number",
        "user_id",
        "car_number",
        "accident_date",
        "description",
        "accident_photo_1_url",
        "accident_photo_2_url",
        "insurance_receipt_url",
        "police_report_url",
        "progress",
        "status",
        "status_mode",
        "created_at",
        "updated_at",
    ),
    "claim_audit_log": (
        "id",
        "claim_id",
        "action",
        "actor_id",
        "old_status",
        "new_status",
        "old_progress",
        "new_progress",
        "details",
        "created_at",
    ),
    "posts": (
        "id",
        "title",
        "content",
        "media_url",
        "media_type",
        "created_by",
        "created_at",
        "updated_at",
    ),
    "comments": ("id", "post_id", "user_id", "content", "created_at"),
}

# (collection, record) written in the same transaction as the main row
Companion = tuple[str, dict[str, Any]]

_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%f', 'now')"


class StoreError(Exception):
    """Store-level failure (connection, I/O, malformed query)."""


class StoreConflict(Exception):
    """A uniqueness or integrity constraint rejected the write."""


class StoreUsageError(Exception):
    """Unknown collection or field. A caller bug, never retried."""


def _columns(collection: str) -> tuple[str, ...]:
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise StoreUsageError(f"Unknown collection: {collection}") from None


def _check_fields(collection: str, fields: Any) -> None:
    allowed = _columns(collection)
    unknown = [f for f in fields if f not in allowed]
    if unknown:
        raise StoreUsageError(f"Unknown field(s) for {collection}: {', '.join(unknown)}")


def _where(predicate: dict[str, Any]) -> tuple[str, list[Any]]:
    if not predicate:
        return "", []
    parts = []
    params: list[Any] = []
    for key, value in predicate.items():
        if value is None:
            parts.append(f"{key} IS NULL")
        else:
            parts.append(f"{key} = ?")
            params.append(value)
    return " WHERE " + " AND ".join(parts), params


def _check_record(collection: str, record: dict[str, Any]) -> None:
    _check_fields(collection, record)
    if not record:
        raise StoreUsageError("Cannot insert an empty record")


def _insert_row(conn: sqlite3.Connection, collection: str, record: dict[str, Any]) -> int:
    cols = list(record)
    cur = conn.execute(
        f"INSERT INTO {collection} ({', '.join(cols)}) VALUES ({', '.join('?' for _ in cols)})",
        [record[c] for c in cols],
    )
    return cur.lastrowid


def _fetch_rowid(conn: sqlite3.Connection, collection: str, rowid: int) -> dict[str, Any]:
    row = conn.execute(f"SELECT * FROM {collection} WHERE rowid = ?", (rowid,)).fetchone()
    return dict(row)


class RecordStore:
    """CRUD over the SQLite collections. All sqlite3 errors become StoreError/StoreConflict.

    Unknown collections or fields raise StoreUsageError before any I/O.
    """

    def __init__(self, db_path: str | None = None):
        self._db_path = db_path

    def _execute(self, fn):
        try:
            with get_connection(self._db_path) as conn:
                return fn(conn)
        except sqlite3.IntegrityError as e:
            raise StoreConflict(str(e)) from e
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e

    def find(self, collection: str, **predicate: Any) -> dict[str, Any] | None:
        """Return the first record matching predicate, or None."""
        _check_fields(collection, predicate)
        where, params = _where(predicate)

        def run(conn):
            row = conn.execute(
                f"SELECT * FROM {collection}{where} LIMIT 1", params
            ).fetchone()
            return dict(row) if row is not None else None

        return self._execute(run)

    def insert(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        """Insert record and return it as stored (with defaults filled in)."""
        _check_record(collection, record)

        def run(conn):
            return _fetch_rowid(conn, collection, _insert_row(conn, collection, record))

        return self._execute(run)

    def insert_sequenced(
        self,
        collection: str,
        record: dict[str, Any],
        field: str,
        prefix: str,
        width: int = 5,
        companion: Companion | None = None,
    ) -> dict[str, Any]:
        """Insert record with field set to the next ``<prefix><NNNNN>`` value.

        The sequence is read and the row written inside one IMMEDIATE
        transaction, so concurrent writers cannot draw the same number.
        ``companion`` is a ``(collection, record)`` pair (e.g. an audit entry)
        written in the same transaction: both rows are stored or neither is.
        """
        _check_fields(collection, [*record, field])
        if companion is not None:
            _check_record(*companion)

        def run(conn):
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                f"SELECT MAX(CAST(substr({field}, ?) AS INTEGER)) FROM {collection} "
                f"WHERE {field} LIKE ?",
                (len(prefix) + 1, f"{prefix}%"),
            ).fetchone()
            next_value = (row[0] or 0) + 1
            rowid = _insert_row(conn, collection, {**record, field: f"{prefix}{next_value:0{width}d}"})
            if companion is not None:
                _insert_row(conn, *companion)
            return _fetch_rowid(conn, collection, rowid)

        return self._execute(run)

    def update(
        self,
        collection: str,
        record_id: str,
        patch: dict[str, Any],
        companion: Companion | None = None,
    ) -> dict[str, Any] | None:
        """Apply patch to one record. Returns the updated record or None.

        ``companion`` is written in the same transaction, and only when the
        record exists.
        """
        _check_fields(collection, patch)
        if companion is not None:
            _check_record(*companion)
        sets = [f"{k} = ?" for k in patch]
        params: list[Any] = list(patch.values())
        if "updated_at" in _columns(collection) and "updated_at" not in patch:
            sets.append(f"updated_at = {_NOW_SQL}")
        if not sets:
            return self.find(collection, id=record_id)
        params.append(record_id)

        def run(conn):
            cur = conn.execute(
                f"UPDATE {collection} SET {', '.join(sets)} WHERE id = ?", params
            )
            if cur.rowcount == 0:
                return None
            if companion is not None:
                _insert_row(conn, *companion)
            row = conn.execute(
                f"SELECT * FROM {collection} WHERE id = ?", (record_id,)
            ).fetchone()
            return dict(row)

        return self._execute(run)

    def delete(self, collection: str, record_id: str) -> bool:
        """Delete one record. Returns False if it did not exist."""
        _columns(collection)

        def run(conn):
            cur = conn.execute(f"DELETE FROM {collection} WHERE id = ?", (record_id,))
            return cur.rowcount > 0

        return self._execute(run)

    def list(
        self,
        collection: str,
        order_by: str = "created_at",
        descending: bool = True,
        **predicate: Any,
    ) -> list[dict[str, Any]]:
        """List records matching predicate, ordered by order_by (rowid breaks ties)."""
        _check_fields(collection, [*predicate, order_by])
        where, params = _where(predicate)
        direction = "DESC" if descending else "ASC"

        def run(conn):
            rows = conn.execute(
                f"SELECT * FROM {collection}{where} "
                f"ORDER BY {order_by} {direction}, rowid {direction}",
                params,
            ).fetchall()
            return [dict(r) for r in rows]

        return self._execute(run)

    def count(self, collection: str, **predicate: Any) -> int:
        """Count records matching predicate."""
        _check_fields(collection, predicate)
        where, params = _where(predicate)

        def run(conn):
            return conn.execute(
                f"SELECT COUNT(*) FROM {collection}{where}", params
            ).fetchone()[0]

        return self._execute(run)
