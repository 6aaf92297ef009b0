"""Database repository for accounts and session tokens.

Session tokens are never stored; only their SHA-256 digest is kept,
together with expiry and revocation timestamps.
"""

import json
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from applytrack.accounts.models import User
from applytrack.tracker.models import format_datetime, parse_datetime

CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    first_name TEXT,
    last_name TEXT,
    phone TEXT,
    resume_url TEXT,
    address_street TEXT,
    address_city TEXT,
    address_state TEXT,
    address_zip TEXT,
    address_country TEXT,
    education TEXT NOT NULL DEFAULT '[]',
    experience TEXT NOT NULL DEFAULT '[]',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS sessions (
    token_hash TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    created_at TEXT NOT NULL,
    expires_at TEXT NOT NULL,
    revoked_at TEXT
);
CREATE INDEX IF NOT EXISTS idx_sessions_user ON sessions(user_id);
"""

PROFILE_COLUMNS = (
    "first_name",
    "last_name",
    "phone",
    "resume_url",
    "address_street",
    "address_city",
    "address_state",
    "address_zip",
    "address_country",
    "education",
    "experience",
)
JSON_COLUMNS = {"education", "experience"}


class AccountRepository:
    """Async SQLite repository for users and their sessions."""

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None

    @asynccontextmanager
    async def _get_connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        if self._connection is None:
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
        yield self._connection

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with self._get_connection() as conn:
            await conn.executescript(CREATE_TABLES_SQL)
            await conn.commit()

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def insert_user(
        self,
        *,
        user_id: str,
        email: str,
        password_hash: str,
        first_name: str | None,
        last_name: str | None,
        now: datetime,
    ) -> None:
        """Insert a new account.

        Raises:
            sqlite3.IntegrityError: If the email is already registered.
        """
        async with self._get_connection() as conn:
            await conn.execute(
                """
                INSERT INTO users (
                    id, email, password_hash, first_name, last_name,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    email,
                    password_hash,
                    first_name,
                    last_name,
                    format_datetime(now),
                    format_datetime(now),
                ),
            )
            await conn.commit()

    async def get_user(self, user_id: str) -> User | None:
        async with self._get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = await cursor.fetchone()
        return self._row_to_user(row) if row is not None else None

    async def get_credentials(self, email: str) -> tuple[str, str] | None:
        """Return ``(user_id, password_hash)`` for an email, if registered."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT id, password_hash FROM users WHERE email = ?", (email,)
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        return row["id"], row["password_hash"]

    async def get_password_hash(self, user_id: str) -> str | None:
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT password_hash FROM users WHERE id = ?", (user_id,)
            )
            row = await cursor.fetchone()
        return row["password_hash"] if row is not None else None

    async def update_profile(
        self, user_id: str, changes: dict[str, Any], now: datetime
    ) -> None:
        columns = [column for column in PROFILE_COLUMNS if column in changes]
        values = [
            json.dumps(changes[column] or []) if column in JSON_COLUMNS else changes[column]
            for column in columns
        ]
        assignments = ", ".join(f"{column} = ?" for column in [*columns, "updated_at"])
        async with self._get_connection() as conn:
            await conn.execute(
                f"UPDATE users SET {assignments} WHERE id = ?",
                (*values, format_datetime(now), user_id),
            )
            await conn.commit()

    async def update_password_hash(
        self, user_id: str, password_hash: str, now: datetime
    ) -> None:
        async with self._get_connection() as conn:
            await conn.execute(
                "UPDATE users SET password_hash = ?, updated_at = ? WHERE id = ?",
                (password_hash, format_datetime(now), user_id),
            )
            await conn.commit()

    async def insert_session(
        self, *, token_hash: str, user_id: str, now: datetime, expires_at: datetime
    ) -> None:
        async with self._get_connection() as conn:
            await conn.execute(
                """
                INSERT INTO sessions (token_hash, user_id, created_at, expires_at)
                VALUES (?, ?, ?, ?)
                """,
                (token_hash, user_id, format_datetime(now), format_datetime(expires_at)),
            )
            await conn.commit()

    async def resolve_session(self, token_hash: str, now: datetime) -> str | None:
        """Return the user id of a live (unexpired, unrevoked) session."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT user_id, expires_at, revoked_at FROM sessions WHERE token_hash = ?",
                (token_hash,),
            )
            row = await cursor.fetchone()
        if row is None or row["revoked_at"] is not None:
            return None
        if parse_datetime(row["expires_at"]) <= now:
            return None
        return row["user_id"]

    async def revoke_session(self, token_hash: str, now: datetime) -> None:
        async with self._get_connection() as conn:
            await conn.execute(
                """
                UPDATE sessions SET revoked_at = ?
                WHERE token_hash = ? AND revoked_at IS NULL
                """,
                (format_datetime(now), token_hash),
            )
            await conn.commit()

    async def revoke_user_sessions(
        self, user_id: str, now: datetime, *, keep_token_hash: str | None = None
    ) -> None:
        """Revoke every live session of a user, optionally sparing one."""
        async with self._get_connection() as conn:
            await conn.execute(
                """
                UPDATE sessions SET revoked_at = ?
                WHERE user_id = ? AND revoked_at IS NULL AND token_hash != ?
                """,
                (format_datetime(now), user_id, keep_token_hash or ""),
            )
            await conn.commit()

    @staticmethod
    def _row_to_user(row: aiosqlite.Row) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            phone=row["phone"],
            resume_url=row["resume_url"],
            address_street=row["address_street"],
            address_city=row["address_city"],
            address_state=row["address_state"],
            address_zip=row["address_zip"],
            address_country=row["address_country"],
            education=json.loads(row["education"] or "[]"),
            experience=json.loads(row["experience"] or "[]"),
            created_at=parse_datetime(row["created_at"]),
            updated_at=parse_datetime(row["updated_at"]),
        )
