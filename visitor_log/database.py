"""
Database module for Visitor Log.

Owns the canonical set of visitors. The data lives in an in-memory SQLite
database; the whole database, serialized, is the snapshot kept by the
snapshot store. Every committed change is persisted and the in-memory view
is rebuilt from the persisted snapshot, so the two never drift apart.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone

from visitor_log.config import SNAPSHOT_KEY
from visitor_log.errors import (
    MalformedInput,
    NotFound,
    PersistenceFailure,
    TransactionAborted,
)
from visitor_log.models import CANONICAL_COLUMNS, Visitor

logger = logging.getLogger(__name__)


# Schema migrations

def _columns(conn, table):
    return {r["name"] for r in conn.execute(f"PRAGMA table_info({table})")}


def _create_visitors(conn):
    conn.execute("""
        CREATE TABLE IF NOT EXISTS visitors(
            id TEXT PRIMARY KEY,
            firstName TEXT,
            lastName TEXT,
            flatNumber TEXT,
            dateOfBirth TEXT,
            scannedIdPicUrl TEXT,
            isBanned INTEGER DEFAULT 0,
            notes TEXT
        )
    """)


def _add_column(column):
    def migrate(conn):
        # older snapshots may already carry the column
        if column not in _columns(conn, "visitors"):
            conn.execute(f"ALTER TABLE visitors ADD COLUMN {column} TEXT DEFAULT ''")
    return migrate


MIGRATIONS = [
    (1, "create_visitors", _create_visitors),
    (2, "add_phone_number", _add_column("phoneNumber")),
    (3, "add_general_notes", _add_column("generalNotes")),
]

SCHEMA_VERSION = MIGRATIONS[-1][0]


class Database:
    """Encapsulates all visitor storage operations for the application."""

    def __init__(self, snapshots, key: str = SNAPSHOT_KEY):
        self.snapshots = snapshots
        self.key = key
        self._lock = threading.RLock()
        self._visitors = []
        self._index = {}

        try:
            self.conn = self._open(self.snapshots.load(self.key))
            migrated = self.migrate()
        except (OSError, sqlite3.DatabaseError) as e:
            raise PersistenceFailure(f"Could not open snapshot '{self.key}': {e}") from e
        if migrated:
            self.persist()
        self._load_view()

    @staticmethod
    def _open(data):
        """Open an in-memory connection, optionally filled from a snapshot."""
        # transactions are managed explicitly with BEGIN / COMMIT
        conn = sqlite3.connect(":memory:", isolation_level=None)
        if data:
            conn.deserialize(data)
        conn.row_factory = sqlite3.Row
        return conn

    def close(self):
        self.conn.close()

    # Schema

    def migrate(self) -> bool:
        """Apply pending migrations in one transaction. Returns True if any ran."""
        current = self.conn.execute("PRAGMA user_version").fetchone()[0]
        pending = [m for m in MIGRATIONS if m[0] > current]
        if not pending:
            return False

        self.conn.execute("BEGIN")
        try:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_migrations(
                    version INTEGER PRIMARY KEY,
                    name TEXT,
                    applied_at TEXT
                )
            """)
            for version, name, step in pending:
                step(self.conn)
                self.conn.execute(
                    "INSERT INTO schema_migrations(version, name, applied_at) VALUES(?, ?, ?)",
                    (version, name, datetime.now(timezone.utc).isoformat()),
                )
                logger.info("Applied schema migration %d (%s)", version, name)
            self.conn.execute(f"PRAGMA user_version = {pending[-1][0]}")
        except Exception:
            if self.conn.in_transaction:
                self.conn.execute("ROLLBACK")
            logger.exception("Schema migration failed; snapshot left at version %d", current)
            raise
        self.conn.execute("COMMIT")
        return True

    def applied_migrations(self):
        """Return (version, name, applied_at) for every migration ever applied."""
        rows = self.conn.execute(
            "SELECT version, name, applied_at FROM schema_migrations ORDER BY version"
        ).fetchall()
        return [(r["version"], r["name"], r["applied_at"]) for r in rows]

    # Snapshot

    def persist(self):
        """Write the whole database to the snapshot store."""
        try:
            data = self.conn.serialize()
        except sqlite3.Error as e:
            raise PersistenceFailure(f"Could not serialize database: {e}") from e
        self.snapshots.save(self.key, data)

    def reload(self):
        """Rebuild the connection and the visitor view from the saved snapshot."""
        with self._lock:
            data = self.snapshots.load(self.key)
            self.conn.close()
            self.conn = self._open(data)
            if data is None:
                self.migrate()
            self._load_view()

    def _load_view(self):
        visitors = []
        for row in self.conn.execute("SELECT * FROM visitors ORDER BY rowid"):
            try:
                visitors.append(Visitor.from_mapping(dict(row)))
            except MalformedInput as e:
                logger.warning("Hiding stored visitor %r: %s", row["id"], e)
        self._visitors = visitors
        self._index = {v.id: v for v in visitors}

    @contextmanager
    def batch(self):
        """Run a group of writes as one transaction.

        Commit is followed by persist and reload. Anything raised inside the
        block rolls the transaction back and surfaces as TransactionAborted.
        If the snapshot cannot be written the previous snapshot is reloaded
        and PersistenceFailure propagates.
        """
        with self._lock:
            self.conn.execute("BEGIN")
            try:
                yield self
            except Exception as e:
                if self.conn.in_transaction:
                    self.conn.execute("ROLLBACK")
                logger.error("Transaction rolled back: %s", e)
                raise TransactionAborted(f"Transaction rolled back: {e}", cause=e) from e
            self.conn.execute("COMMIT")
            try:
                self.persist()
            except PersistenceFailure:
                logger.exception("Persisting snapshot failed; restoring previous state")
                self.reload()
                raise
            self.reload()

    # Visitors

    def get(self, visitor_id):
        """Return the visitor with this id, or None."""
        return self._index.get(visitor_id)

    def require(self, visitor_id):
        """Like get(), but raises NotFound."""
        visitor = self.get(visitor_id)
        if visitor is None:
            raise NotFound(f"No visitor with id {visitor_id!r}")
        return visitor

    def all(self):
        """Return all visitors in insertion order."""
        return list(self._visitors)

    def exists(self, visitor_id) -> bool:
        """Check the database itself, including writes not yet committed."""
        cur = self.conn.execute("SELECT 1 FROM visitors WHERE id=?", (visitor_id,))
        return cur.fetchone() is not None

    def upsert(self, visitor: Visitor, fields=None):
        """Insert a visitor, or replace the stored one with the same id.

        ``fields`` limits which columns an update overwrites. Outside of a
        batch the write is wrapped in its own batch, so it is always
        persisted.
        """
        if not self.conn.in_transaction:
            with self.batch():
                self.upsert(visitor, fields)
            return

        values = [_db_value(visitor, c) for c in CANONICAL_COLUMNS]
        update = [c for c in CANONICAL_COLUMNS if c != "id" and (fields is None or c in fields)]
        if update:
            conflict = "DO UPDATE SET " + ", ".join(f"{c}=excluded.{c}" for c in update)
        else:
            conflict = "DO NOTHING"
        self.conn.execute(
            f"""
            INSERT INTO visitors({", ".join(CANONICAL_COLUMNS)})
            VALUES({", ".join("?" * len(CANONICAL_COLUMNS))})
            ON CONFLICT(id) {conflict}
            """,
            values,
        )

    def update_status(self, visitor_id, banned: bool, notes: str = ""):
        """Set ban status and its notes, returning the stored result."""
        with self._lock:
            visitor = self.require(visitor_id)
            changed = visitor.with_changes(isBanned=bool(banned), notes=notes or "")
            with self.batch():
                self.upsert(changed, fields=("isBanned", "notes"))
            return self.require(visitor_id)

    def update_general_notes(self, visitor_id, notes: str):
        """Replace a visitor's general notes, returning the stored result."""
        with self._lock:
            visitor = self.require(visitor_id)
            with self.batch():
                self.upsert(visitor.with_changes(generalNotes=notes or ""), fields=("generalNotes",))
            return self.require(visitor_id)

    # Stats

    def stats(self):
        """Return (banned_count, total_count)."""
        banned = sum(1 for v in self._visitors if v.isBanned)
        return banned, len(self._visitors)


def _db_value(visitor, column):
    value = getattr(visitor, column)
    if column == "isBanned":
        return 1 if value else 0
    return value
