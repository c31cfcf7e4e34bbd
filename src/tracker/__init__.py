"""Job record store.

This module provides the record store the board reads its snapshot
from and writes position updates to.

Public API:
- BoardService: Creates jobs, persists positions, supplies snapshots
- JobRepository: Database repository for job records
- JobRecord: Data model for one job application
- JobStatus: Enum of board columns
- PositionUpdate: Validated (status, order key) payload
- JobCreate, JobUpdate: Validated payloads for adding and editing jobs
"""

from src.tracker.models import (
    InvalidStatusError,
    JobCreate,
    JobRecord,
    JobStatus,
    JobUpdate,
    PositionUpdate,
)
from src.tracker.repository import JobRepository
from src.tracker.service import BoardService, PersistenceError

__all__ = [
    "BoardService",
    "JobRepository",
    "JobRecord",
    "JobStatus",
    "JobCreate",
    "JobUpdate",
    "PositionUpdate",
    "InvalidStatusError",
    "PersistenceError",
]
