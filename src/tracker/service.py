"""Business logic service for the job board.

This module provides the BoardService class which handles:
- Creating jobs at the top of their column and editing their fields
- Applying validated position updates (the board's persistence client)
- Supplying the authoritative board snapshot
"""

import logging
import sqlite3

from src.ordering.keys import OrderKeyError, key_at_start
from src.tracker.models import (
    JobCreate,
    JobRecord,
    JobStatus,
    JobUpdate,
    PositionUpdate,
)
from src.tracker.repository import JobRepository

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when the store cannot be read or written."""


class BoardService:
    """Business logic service for the job board.

    This class coordinates the ordering engine and the repository, and
    is what the drag session controller talks to for persistence and
    snapshots.
    """

    def __init__(self, repository: JobRepository):
        """Initialize the service.

        Args:
            repository: The JobRepository instance for database access.
        """
        self.repository = repository

    async def create_job(self, data: JobCreate) -> JobRecord:
        """Add a job to the top of its column.

        Args:
            data: Validated job fields.

        Returns:
            The stored job.
        """
        try:
            order_key = await self._top_of_column_key(data.status)
            job_id = await self.repository.insert_job(
                company=data.company,
                status=data.status,
                order_key=order_key,
                title=data.title,
                location=data.location,
                job_posting_url=data.job_posting_url,
                notes=data.notes,
                contact_person=data.contact_person,
                date_applied=data.date_applied,
            )
            record = await self.repository.get_by_id(job_id)
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to create job: {e}") from e

        logger.info(f"Created job {job_id} ({data.company}) in {data.status.value}")
        return record

    async def update_job(self, record_id: int, data: JobUpdate) -> JobRecord | None:
        """Edit a job's fields.

        A status change moves the job to the top of its new column, the same
        place a new job lands. Position within a column is only changed by
        ``update_position``.

        Args:
            record_id: The id of the job to edit.
            data: The fields to change.

        Returns:
            The updated job, or None if it does not exist.

        Raises:
            PersistenceError: If the database read or write fails.
        """
        changes = data.changes()
        try:
            current = await self.repository.get_by_id(record_id)
            if current is None:
                return None

            status = changes.get("status")
            if status is not None and status != current.status:
                changes["order_key"] = await self._top_of_column_key(status)

            updated = await self.repository.update_job(record_id, **changes)
            record = await self.repository.get_by_id(record_id) if updated else None
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to update job {record_id}: {e}") from e

        if record is not None:
            fields = ", ".join(sorted(changes)) or "no fields"
            logger.info(f"Updated job {record_id}: {fields}")
        return record

    async def update_position(self, record_id: int, update: PositionUpdate) -> bool:
        """Persist a job's new column and order key.

        Args:
            record_id: The id of the job to move.
            update: The validated new position.

        Returns:
            True if the job was updated, False if it does not exist.

        Raises:
            PersistenceError: If the database write fails.
        """
        try:
            updated = await self.repository.update_position(
                record_id, update.status, update.order_key
            )
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to update job {record_id}: {e}") from e

        if not updated:
            logger.warning(f"Job {record_id} not found; position not saved")
        return updated

    async def list_jobs(self) -> list[JobRecord]:
        """Return the authoritative board snapshot.

        Raises:
            PersistenceError: If the database read fails.
        """
        try:
            return await self.repository.list_jobs()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to list jobs: {e}") from e

    async def get_job(self, record_id: int) -> JobRecord | None:
        """Get a job by id.

        Args:
            record_id: The id to look up.

        Returns:
            The JobRecord if found, None otherwise.
        """
        return await self.repository.get_by_id(record_id)

    async def delete_job(self, record_id: int) -> bool:
        """Soft delete a job.

        Returns:
            True if a job was deleted.
        """
        try:
            return await self.repository.soft_delete(record_id)
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to delete job {record_id}: {e}") from e

    async def get_status_counts(self) -> dict[JobStatus, int]:
        """Return the number of jobs in every column, including empty ones."""
        counts = await self.repository.get_status_counts()
        return {status: counts.get(status, 0) for status in JobStatus}

    async def _top_of_column_key(self, status: JobStatus) -> str:
        first_key = await self.repository.get_first_order_key(status)
        try:
            return key_at_start(first_key)
        except OrderKeyError:
            # Nothing sorts below a legacy key such as "0"; share it.
            return first_key
