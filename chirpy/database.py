"""SQLite-backed storage for users and chirps."""

from __future__ import annotations

import sqlite3
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    email TEXT NOT NULL,
    hashed_password TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS chirps (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    body TEXT NOT NULL,
    user_id TEXT NOT NULL
);
"""

_CHIRP_COLUMNS = "id, created_at, updated_at, body, user_id"
_USER_COLUMNS = "id, created_at, updated_at, email, hashed_password"


class NotFoundError(LookupError):
    """Raised when a query that expects a row finds none."""


@dataclass(frozen=True)
class Chirp:
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    body: str
    user_id: uuid.UUID


@dataclass(frozen=True)
class User:
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    email: str
    hashed_password: str


def connect(path) -> sqlite3.Connection:
    """Open a database connection usable from several threads."""
    return sqlite3.connect(str(path), isolation_level=None, check_same_thread=False)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _stamp(moment: datetime) -> str:
    return moment.isoformat(timespec="microseconds")


def _chirp_from_row(row) -> Chirp:
    return Chirp(
        id=uuid.UUID(row[0]),
        created_at=datetime.fromisoformat(row[1]),
        updated_at=datetime.fromisoformat(row[2]),
        body=row[3],
        user_id=uuid.UUID(row[4]),
    )


def _user_from_row(row) -> User:
    return User(
        id=uuid.UUID(row[0]),
        created_at=datetime.fromisoformat(row[1]),
        updated_at=datetime.fromisoformat(row[2]),
        email=row[3],
        hashed_password=row[4],
    )


class Queries:
    """The application's queries over one database connection."""

    def __init__(self, connection: sqlite3.Connection):
        self._connection = connection
        self._lock = threading.RLock()
        self._in_transaction = False

    def _fetch(self, sql: str, params=()) -> list:
        with self._lock:
            rows = self._connection.execute(sql, params).fetchall()
            if not self._in_transaction and self._connection.in_transaction:
                self._connection.commit()
        return rows

    def _fetch_one(self, sql: str, params=()):
        rows = self._fetch(sql, params)
        if not rows:
            raise NotFoundError("no rows in result set")
        return rows[0]

    def create_schema(self) -> None:
        """Create the tables if they do not exist yet."""
        with self._lock:
            self._connection.executescript(_SCHEMA)

    @contextmanager
    def transaction(self) -> Iterator["Queries"]:
        """Yield queries that run in one transaction, committed on success."""
        if self._in_transaction:
            yield self
            return
        with self._lock:
            tx = Queries(self._connection)
            tx._lock = self._lock
            tx._in_transaction = True
            self._connection.execute("BEGIN")
            try:
                yield tx
            except BaseException:
                self._connection.rollback()
                raise
            else:
                self._connection.commit()
            finally:
                tx._in_transaction = False

    def create_chirp(self, body: str, user_id: uuid.UUID) -> Chirp:
        now = _now()
        chirp = Chirp(id=uuid.uuid4(), created_at=now, updated_at=now, body=body, user_id=user_id)
        self._fetch(
            f"INSERT INTO chirps ({_CHIRP_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
            (str(chirp.id), _stamp(now), _stamp(now), body, str(user_id)),
        )
        return chirp

    def get_chirp_by_id(self, chirp_id: uuid.UUID) -> Chirp:
        row = self._fetch_one(
            f"SELECT {_CHIRP_COLUMNS} FROM chirps WHERE id = ?", (str(chirp_id),)
        )
        return _chirp_from_row(row)

    def get_chirps(self) -> list[Chirp]:
        rows = self._fetch(f"SELECT {_CHIRP_COLUMNS} FROM chirps ORDER BY created_at, rowid")
        return [_chirp_from_row(row) for row in rows]

    def remove_chirps(self) -> None:
        self._fetch("DELETE FROM chirps")

    def create_user(self, email: str, hashed_password: str) -> User:
        now = _now()
        user = User(
            id=uuid.uuid4(),
            created_at=now,
            updated_at=now,
            email=email,
            hashed_password=hashed_password,
        )
        self._fetch(
            f"INSERT INTO users ({_USER_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
            (str(user.id), _stamp(now), _stamp(now), email, hashed_password),
        )
        return user

    def get_user_id(self, email: str) -> uuid.UUID:
        row = self._fetch_one("SELECT id FROM users WHERE email = ?", (email,))
        return uuid.UUID(row[0])

    def get_user_password(self, email: str) -> User:
        row = self._fetch_one(
            f"SELECT {_USER_COLUMNS} FROM users WHERE email = ?", (email,)
        )
        return _user_from_row(row)

    def remove_users(self) -> None:
        self._fetch("DELETE FROM users")