"""Database repository for the job board.

This module provides async SQLite database operations for storing
and retrieving job application records and their board positions.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import date, datetime
from pathlib import Path

import aiosqlite

from src.tracker.models import LEGACY_ORDER_KEY, JobRecord, JobStatus

# SQL schema for the jobs table
CREATE_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS jobs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    company TEXT NOT NULL,
    title TEXT,
    location TEXT,
    status TEXT NOT NULL DEFAULT 'WISHLIST',
    order_key TEXT NOT NULL DEFAULT '{LEGACY_ORDER_KEY}',
    job_posting_url TEXT,
    notes TEXT,
    contact_person TEXT,
    date_applied TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    deleted_at TEXT
)
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_jobs_status ON jobs(status);
CREATE INDEX IF NOT EXISTS idx_jobs_status_order ON jobs(status, order_key);
"""

EDITABLE_COLUMNS = frozenset(
    {
        "company",
        "title",
        "location",
        "status",
        "order_key",
        "job_posting_url",
        "notes",
        "contact_person",
        "date_applied",
    }
)

# Order keys compare byte-wise: BINARY collation, never NOCASE or locale.
LIVE_JOBS_ORDER_SQL = "ORDER BY order_key COLLATE BINARY ASC, created_at DESC"


class JobRepository:
    """Async SQLite repository for job records.

    This class provides CRUD operations for job application records
    using aiosqlite for async database access. Deleted jobs are kept
    with a ``deleted_at`` timestamp and hidden from every query.
    """

    def __init__(self, db_path: Path | str):
        """Initialize the repository.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None

    @asynccontextmanager
    async def _get_connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Get a database connection.

        Yields:
            An aiosqlite connection.
        """
        if self._connection is None:
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
        yield self._connection

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        # Ensure parent directory exists
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

    async def insert_job(
        self,
        *,
        company: str,
        status: JobStatus,
        order_key: str,
        title: str | None = None,
        location: str | None = None,
        job_posting_url: str | None = None,
        notes: str | None = None,
        contact_person: str | None = None,
        date_applied: date | None = None,
        created_at: datetime | None = None,
    ) -> int:
        """Insert a new job.

        Returns:
            The id of the new row.
        """
        created = created_at or datetime.now()
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO jobs (
                    company, title, location, status, order_key,
                    job_posting_url, notes, contact_person, date_applied,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    company,
                    title,
                    location,
                    status.value,
                    order_key,
                    job_posting_url,
                    notes,
                    contact_person,
                    date_applied.isoformat() if date_applied else None,
                    created.isoformat(),
                    created.isoformat(),
                ),
            )
            await conn.commit()
            return cursor.lastrowid

    async def get_by_id(self, job_id: int) -> JobRecord | None:
        """Get a live job by its id.

        Args:
            job_id: The id to look up.

        Returns:
            The job if found and not deleted, None otherwise.
        """
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM jobs WHERE id = ? AND deleted_at IS NULL",
                (job_id,),
            )
            row = await cursor.fetchone()

        if row is None:
            return None

        return self._row_to_record(row)

    async def list_jobs(self, status_filter: JobStatus | None = None) -> list[JobRecord]:
        """List live jobs in board order.

        Args:
            status_filter: Optional column to restrict the listing to.

        Returns:
            Jobs ordered by order key ascending, then newest first.
        """
        async with self._get_connection() as conn:
            if status_filter is not None:
                cursor = await conn.execute(
                    f"""
                    SELECT * FROM jobs
                    WHERE deleted_at IS NULL AND status = ?
                    {LIVE_JOBS_ORDER_SQL}
                    """,
                    (status_filter.value,),
                )
            else:
                cursor = await conn.execute(
                    f"""
                    SELECT * FROM jobs
                    WHERE deleted_at IS NULL
                    {LIVE_JOBS_ORDER_SQL}
                    """
                )
            rows = await cursor.fetchall()

        return [self._row_to_record(row) for row in rows]

    async def update_position(
        self, job_id: int, status: JobStatus, order_key: str
    ) -> bool:
        """Move a job to a column and order key in one statement.

        Args:
            job_id: The id of the job to move.
            status: The new column.
            order_key: The new order key.

        Returns:
            True if a live job was updated, False if none matched.
        """
        now = datetime.now().isoformat()

        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                UPDATE jobs
                SET status = ?, order_key = ?, updated_at = ?
                WHERE id = ? AND deleted_at IS NULL
                """,
                (status.value, order_key, now, job_id),
            )
            await conn.commit()
            return cursor.rowcount == 1

    async def update_job(self, job_id: int, **fields) -> bool:
        """Update editable fields of a live job.

        Args:
            job_id: The id of the job to update.
            **fields: Column values to set; only ``EDITABLE_COLUMNS`` are
                accepted.

        Returns:
            True if a live job was updated, False if none matched.

        Raises:
            ValueError: If a field is not editable.
        """
        unknown = set(fields) - EDITABLE_COLUMNS
        if unknown:
            raise ValueError(f"Fields cannot be edited: {sorted(unknown)}")

        values = dict(fields)
        if isinstance(values.get("status"), JobStatus):
            values["status"] = values["status"].value
        if isinstance(values.get("date_applied"), date):
            values["date_applied"] = values["date_applied"].isoformat()
        values["updated_at"] = datetime.now().isoformat()

        assignments = ", ".join(f"{column} = ?" for column in values)
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                f"UPDATE jobs SET {assignments} WHERE id = ? AND deleted_at IS NULL",
                (*values.values(), job_id),
            )
            await conn.commit()
            return cursor.rowcount == 1

    async def soft_delete(self, job_id: int) -> bool:
        """Mark a job as deleted.

        Returns:
            True if a live job was deleted.
        """
        now = datetime.now().isoformat()

        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                UPDATE jobs
                SET deleted_at = ?, updated_at = ?
                WHERE id = ? AND deleted_at IS NULL
                """,
                (now, now, job_id),
            )
            await conn.commit()
            return cursor.rowcount == 1

    async def get_first_order_key(self, status: JobStatus) -> str | None:
        """Return the smallest order key in a column, or None if it is empty."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT order_key FROM jobs
                WHERE status = ? AND deleted_at IS NULL
                ORDER BY order_key COLLATE BINARY ASC
                LIMIT 1
                """,
                (status.value,),
            )
            row = await cursor.fetchone()

        return row["order_key"] if row is not None else None

    async def get_status_counts(self) -> dict[JobStatus, int]:
        """Return live job counts grouped by column."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT status, COUNT(*) AS count FROM jobs
                WHERE deleted_at IS NULL
                GROUP BY status
                """
            )
            rows = await cursor.fetchall()

        counts: dict[JobStatus, int] = {}
        for row in rows:
            if not JobStatus.is_status(row["status"]):
                continue
            counts[JobStatus(row["status"])] = int(row["count"] or 0)
        return counts

    def _row_to_record(self, row: aiosqlite.Row) -> JobRecord:
        """Convert a database row to a JobRecord.

        Args:
            row: The database row.

        Returns:
            A JobRecord instance.
        """

        def parse_datetime(value: str | None) -> datetime | None:
            if value is None:
                return None
            return datetime.fromisoformat(value)

        return JobRecord(
            id=row["id"],
            company=row["company"],
            status=JobStatus.parse(row["status"]),
            order_key=row["order_key"] or LEGACY_ORDER_KEY,
            created_at=parse_datetime(row["created_at"]) or datetime.now(),
            title=row["title"],
            location=row["location"],
            job_posting_url=row["job_posting_url"],
            notes=row["notes"],
            contact_person=row["contact_person"],
            date_applied=date.fromisoformat(row["date_applied"])
            if row["date_applied"]
            else None,
            updated_at=parse_datetime(row["updated_at"]),
        )
