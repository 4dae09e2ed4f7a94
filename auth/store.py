"""
auth/store.py -- SQLAlchemy Core persistence layer for user credentials.

Pattern: Repository + Data Mapper. UserStore is the repository;
_row_to_credential / _row_to_profile are the mappers. The coordinator and
the CLI never touch SQL directly.

Store contract used by the authentication core:
  find_credential_by_username(username) -> Credential | None
  find_profile_by_subject_id(subject_id) -> Profile | None

Not found is None; any database failure propagates as a SQLAlchemyError.
Mapping those outcomes to auth failures is the coordinator's job, not ours.

The remaining methods (create_user, delete_user, has_users) are
administrative helpers for the CLI and tests.

Security:
  All queries use bound parameters. No f-strings in SQL.
  Subject IDs are random uuid4 hex strings, so they leak nothing about
  account creation order.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event, func, select
from sqlalchemy.engine import Engine

from auth.models import Credential, Profile

logger = logging.getLogger("authcore.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(32), primary_key=True),  # uuid4 hex, the token subject
    Column("username", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),  # bcrypt modular crypt string
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for user credentials and profiles.

    Usage:
        store = UserStore("sqlite:///authcore.db")
        subject_id = store.create_user("alice", verifier.hash("s3cret"))
        credential = store.find_credential_by_username("alice")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            # Lookups run on the request thread pool, not the creating thread.
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Store contract
    # ------------------------------------------------------------------

    def find_credential_by_username(self, username: str) -> Credential | None:
        """Look up a credential by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.username == username)).fetchone()
        return _row_to_credential(row) if row is not None else None

    def find_profile_by_subject_id(self, subject_id: str) -> Profile | None:
        """Look up a profile by subject ID (primary key). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(
                select(_users.c.id, _users.c.username).where(_users.c.id == subject_id)
            ).fetchone()
        return _row_to_profile(row) if row is not None else None

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def has_users(self) -> bool:
        """Return True if at least one user record exists."""
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_users)).scalar()
        return (result or 0) > 0

    def create_user(self, username: str, password_hash: str) -> str:
        """Insert a new user and return its generated subject ID.

        Raises sqlalchemy.exc.IntegrityError if the username already exists.
        """
        subject_id = uuid.uuid4().hex
        with self.engine.connect() as conn:
            conn.execute(
                _users.insert().values(
                    id=subject_id,
                    username=username,
                    password_hash=password_hash,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
        logger.info("Created user %s (%s)", username, subject_id)
        return subject_id

    def delete_user(self, subject_id: str) -> bool:
        """Permanently delete a user record. Returns True if deleted, False if not found.

        Tokens already issued to the subject stay cryptographically valid until
        they expire; GetProfile reports them as ProfileNotFound.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_users.delete().where(_users.c.id == subject_id))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_credential(row) -> Credential:
    return Credential(subject_id=row.id, username=row.username, password_hash=row.password_hash)


def _row_to_profile(row) -> Profile:
    return Profile(subject_id=row.id, username=row.username)
