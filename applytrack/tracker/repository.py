"""Database repository for tracked applications.

This module provides async SQLite operations for the server-side store.
Every read and write is scoped by owner id, so a record owned by another
account behaves exactly like a missing one.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from applytrack.tracker.models import (
    Application,
    ApplicationStatus,
    Priority,
    format_datetime,
    parse_datetime,
)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS applications (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    company_name TEXT NOT NULL,
    position_title TEXT NOT NULL,
    job_description TEXT,
    job_url TEXT,
    location_city TEXT,
    notes TEXT,
    salary TEXT,
    contact_name TEXT,
    contact_email TEXT,
    contact_phone TEXT,
    status TEXT NOT NULL,
    priority TEXT NOT NULL,
    application_date TEXT NOT NULL,
    reminder_enabled INTEGER NOT NULL DEFAULT 1,
    reminder_days INTEGER NOT NULL DEFAULT 7 CHECK (reminder_days >= 1),
    last_reminder_ack TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_applications_owner ON applications(owner_id);
CREATE INDEX IF NOT EXISTS idx_applications_owner_status ON applications(owner_id, status);
CREATE INDEX IF NOT EXISTS idx_applications_owner_updated ON applications(owner_id, updated_at);
"""

COLUMNS = (
    "id",
    "owner_id",
    "company_name",
    "position_title",
    "job_description",
    "job_url",
    "location_city",
    "notes",
    "salary",
    "contact_name",
    "contact_email",
    "contact_phone",
    "status",
    "priority",
    "application_date",
    "reminder_enabled",
    "reminder_days",
    "last_reminder_ack",
    "created_at",
    "updated_at",
)


class ApplicationRepository:
    """Async SQLite repository for application records."""

    def __init__(self, db_path: Path | str):
        """Initialize the repository.

        Args:
            db_path: Path to the SQLite database file.
        """
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
            await conn.execute(CREATE_TABLE_SQL)
            await conn.executescript(CREATE_INDEX_SQL)
            await conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def insert(self, record: Application) -> None:
        """Insert a new record.

        Raises:
            sqlite3.IntegrityError: If a record with the same id exists.
        """
        placeholders = ", ".join("?" for _ in COLUMNS)
        async with self._get_connection() as conn:
            await conn.execute(
                f"INSERT INTO applications ({', '.join(COLUMNS)}) VALUES ({placeholders})",
                self._record_to_row(record),
            )
            await conn.commit()

    async def get(self, owner_id: str, application_id: str) -> Application | None:
        """Get one of the owner's records, or None if absent or foreign."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM applications WHERE id = ? AND owner_id = ?",
                (application_id, owner_id),
            )
            row = await cursor.fetchone()

        if row is None:
            return None
        return self._row_to_record(row)

    async def list_for_owner(self, owner_id: str) -> list[Application]:
        """List the owner's records, most recently updated first."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM applications
                WHERE owner_id = ?
                ORDER BY updated_at DESC
                """,
                (owner_id,),
            )
            rows = await cursor.fetchall()

        return [self._row_to_record(row) for row in rows]

    async def update(self, record: Application) -> bool:
        """Overwrite a stored record with ``record``.

        Returns:
            False if no record with that id belongs to ``record.owner_id``.
        """
        assignments = ", ".join(f"{column} = ?" for column in COLUMNS[2:])
        row = self._record_to_row(record)
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                f"UPDATE applications SET {assignments} WHERE id = ? AND owner_id = ?",
                (*row[2:], record.id, record.owner_id),
            )
            await conn.commit()
            return cursor.rowcount > 0

    async def delete(self, owner_id: str, application_id: str) -> bool:
        """Delete one of the owner's records.

        Returns:
            True if a record was removed.
        """
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "DELETE FROM applications WHERE id = ? AND owner_id = ?",
                (application_id, owner_id),
            )
            await conn.commit()
            return cursor.rowcount > 0

    async def get_status_counts(self, owner_id: str) -> dict[ApplicationStatus, int]:
        """Return the owner's record counts grouped by status."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT status, COUNT(*) AS count FROM applications
                WHERE owner_id = ?
                GROUP BY status
                """,
                (owner_id,),
            )
            rows = await cursor.fetchall()

        counts: dict[ApplicationStatus, int] = {}
        for row in rows:
            try:
                status = ApplicationStatus(row["status"])
            except ValueError:
                continue
            counts[status] = int(row["count"]) if row["count"] is not None else 0
        return counts

    async def list_recent(self, owner_id: str, limit: int = 5) -> list[Application]:
        """List the owner's most recently updated records."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM applications
                WHERE owner_id = ?
                ORDER BY updated_at DESC
                LIMIT ?
                """,
                (owner_id, limit),
            )
            rows = await cursor.fetchall()

        return [self._row_to_record(row) for row in rows]

    @staticmethod
    def _record_to_row(record: Application) -> tuple:
        return (
            record.id,
            record.owner_id,
            record.company_name,
            record.position_title,
            record.job_description,
            record.job_url,
            record.location_city,
            record.notes,
            record.salary,
            record.contact_name,
            record.contact_email,
            record.contact_phone,
            record.status.value,
            record.priority.value,
            format_datetime(record.application_date),
            1 if record.reminder_enabled else 0,
            record.reminder_days,
            format_datetime(record.last_reminder_ack),
            format_datetime(record.created_at),
            format_datetime(record.updated_at),
        )

    @staticmethod
    def _row_to_record(row: aiosqlite.Row) -> Application:
        return Application(
            id=row["id"],
            owner_id=row["owner_id"],
            company_name=row["company_name"],
            position_title=row["position_title"],
            job_description=row["job_description"],
            job_url=row["job_url"],
            location_city=row["location_city"],
            notes=row["notes"],
            salary=row["salary"],
            contact_name=row["contact_name"],
            contact_email=row["contact_email"],
            contact_phone=row["contact_phone"],
            status=ApplicationStatus(row["status"]),
            priority=Priority(row["priority"]),
            application_date=parse_datetime(row["application_date"]),
            reminder_enabled=bool(row["reminder_enabled"]),
            reminder_days=int(row["reminder_days"]),
            last_reminder_ack=parse_datetime(row["last_reminder_ack"]),
            created_at=parse_datetime(row["created_at"]),
            updated_at=parse_datetime(row["updated_at"]),
        )
