"""Canonical ordering of records within board columns."""

from collections.abc import Iterable

from src.tracker.models import JobRecord, JobStatus


def sorted_records_in_column(
    status: JobStatus, records: Iterable[JobRecord]
) -> list[JobRecord]:
    """Return the records of one column in display order.

    Records are ordered by ``order_key`` ascending using plain string
    comparison (code point order, never locale collation), and records
    sharing a key are ordered newest ``created_at`` first.

    Args:
        status: The column to extract.
        records: Any snapshot of records, in any order.

    Returns:
        A new list; ``records`` is left untouched.
    """
    column = [record for record in records if record.status == status]
    # Two stable passes: tie-break first, primary key last.
    column.sort(key=lambda record: record.created_at, reverse=True)
    column.sort(key=lambda record: record.order_key)
    return column


def group_by_column(records: Iterable[JobRecord]) -> dict[JobStatus, list[JobRecord]]:
    """Split a snapshot into every column of the board, each in display order."""
    snapshot = list(records)
    return {status: sorted_records_in_column(status, snapshot) for status in JobStatus}
