"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta

import pytest

from src.tracker.models import JobRecord, JobStatus

BASE_TIME = datetime(2025, 1, 1, 9, 0, 0)


@pytest.fixture
def make_record():
    """Factory for board records.

    ``age`` is in minutes before a fixed base time, so a larger age means
    an older record.
    """

    def _make(
        record_id: int,
        status: JobStatus = JobStatus.WISHLIST,
        order_key: str = "V",
        age: int = 0,
        company: str | None = None,
    ) -> JobRecord:
        return JobRecord(
            id=record_id,
            company=company or f"Company {record_id}",
            status=status,
            order_key=order_key,
            created_at=BASE_TIME - timedelta(minutes=age),
        )

    return _make
