"""
auth/store.py -- SQLAlchemy Core persistence layer for credential records.

Pattern: Repository + Data Mapper.
UserStore is the repository; _row_to_user is the mapper. Services never
touch SQL directly.

Concurrency:
  The public methods are coroutines. Each one runs its blocking SQLAlchemy
  call in a worker thread (asyncio.to_thread) so the event loop keeps
  serving other requests while the database works.

  Email uniqueness is a UNIQUE constraint on users.email, not an
  application-level check. Two concurrent insert_unique() calls for the same
  email cannot both succeed: the loser gets IntegrityError from the database,
  which is re-raised as EmailAlreadyExists.

Security:
  All queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.models import User

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(32), primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


class EmailAlreadyExists(Exception):
    """insert_unique() lost to an existing record with the same email."""

    def __init__(self, email: str) -> None:
        super().__init__("a user with this email already exists")
        self.email = email


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User records, keyed by email.

    Usage:
        store = UserStore("sqlite:///gatekeeper_auth.db")
        user = await store.insert_unique(User(email="a@x.com", hashed_password=h))
        found = await store.find_by_email("a@x.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def find_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        return await asyncio.to_thread(self._find_by_email, email)

    async def find_by_id(self, user_id: str) -> User | None:
        """Look up a user by the id carried in a token's sub claim."""
        return await asyncio.to_thread(self._find_by_id, user_id)

    async def insert_unique(self, user: User) -> User:
        """Insert a new user and return it with id and created_at filled in.

        Raises EmailAlreadyExists if the email is already taken, including when
        a concurrent request inserted it after the caller's own lookup.
        """
        return await asyncio.to_thread(self._insert_unique, user)

    def close(self) -> None:
        self.engine.dispose()

    # ------------------------------------------------------------------
    # Blocking implementations (run in a worker thread)
    # ------------------------------------------------------------------

    def _find_by_email(self, email: str) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def _find_by_id(self, user_id: str) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def _insert_unique(self, user: User) -> User:
        record = User(
            id=uuid.uuid4().hex,
            email=user.email,
            hashed_password=user.hashed_password,
            created_at=_now_iso(),
        )
        try:
            with self.engine.connect() as conn:
                conn.execute(
                    _users.insert().values(
                        id=record.id,
                        email=record.email,
                        hashed_password=record.hashed_password,
                        created_at=record.created_at,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            raise EmailAlreadyExists(user.email) from exc
        return record


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        hashed_password=row.hashed_password,
        created_at=row.created_at,
    )
