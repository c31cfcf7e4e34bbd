"""Drop resolution: from a drop target to a new (status, order key) pair.

The resolver is pure. It reads a snapshot of records, which may already
show the moved card provisionally in another column, and the moved
record's pre-gesture position, and it never mutates either.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime

from src.ordering.keys import (
    OrderKeyError,
    key_at_end,
    key_at_start,
    key_between,
    validate_order_key,
)
from src.ordering.sorter import sorted_records_in_column
from src.ordering.targets import (
    CardTarget,
    ColumnTarget,
    Direction,
    DropResult,
    DropTarget,
    InvalidDropTargetError,
)
from src.tracker.models import JobRecord, JobStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordPosition:
    """Where a record sat before a gesture started."""

    id: int
    status: JobStatus
    order_key: str

    @classmethod
    def of(cls, record: JobRecord) -> "RecordPosition":
        return cls(id=record.id, status=record.status, order_key=record.order_key)


def resolve_drop(
    moved: RecordPosition,
    target: DropTarget,
    records: Iterable[JobRecord],
) -> DropResult | None:
    """Compute the column and order key a dropped record lands on.

    Args:
        moved: The moved record's pre-gesture position. Change flags are
            computed against these values, never against a preview.
        target: The column or sibling card the record was dropped on.
        records: The current snapshot of all records.

    Returns:
        The resolved placement, or None when the target card is not in
        the snapshot (callers then fall back to the end of a column).

    Raises:
        InvalidDropTargetError: If ``target`` is not a drop target.
        InvalidStatusError: If a column target names an unknown column.
    """
    snapshot = list(records)

    if isinstance(target, ColumnTarget):
        target_status = JobStatus.parse(target.status)
        sibling = None
    elif isinstance(target, CardTarget):
        if target.record_id == moved.id:
            return _resolve_self_drop(moved, snapshot)
        sibling = _find(snapshot, target.record_id)
        if sibling is None:
            logger.debug("Drop target card %s not in snapshot", target.record_id)
            return None
        target_status = sibling.status
    else:
        raise InvalidDropTargetError(f"Invalid drop target: {target!r}")

    # The moved card may already be previewed in this column; leaving it
    # in would shift every index after it.
    live_column = sorted_records_in_column(target_status, snapshot)
    siblings = [record for record in live_column if record.id != moved.id]

    original_column = None
    if moved.status == target_status:
        original_column = _original_column(moved, snapshot)

    if sibling is None:
        index = len(siblings)
    else:
        index = _index_of(siblings, sibling.id)
        direction = target.direction or _infer_direction(
            moved, sibling, siblings, live_column, original_column
        )
        if direction is Direction.AFTER:
            index += 1

    if original_column is not None and index == _index_of(original_column, moved.id):
        # Same slot it started in; keep the key so the drop is a no-op.
        order_key = moved.order_key
    else:
        order_key = _key_for_slot(siblings, index)

    return DropResult(
        status=target_status,
        order_key=order_key,
        status_changed=moved.status != target_status,
        order_changed=moved.order_key != order_key,
    )


def _resolve_self_drop(
    moved: RecordPosition, snapshot: list[JobRecord]
) -> DropResult | None:
    """A card dropped onto itself stays in whichever column shows it."""
    displayed = _find(snapshot, moved.id)
    if displayed is None:
        return None
    if displayed.status != moved.status:
        return resolve_drop(moved, ColumnTarget(displayed.status), snapshot)
    return DropResult(
        status=moved.status,
        order_key=moved.order_key,
        status_changed=False,
        order_changed=False,
    )


def _infer_direction(
    moved: RecordPosition,
    sibling: JobRecord,
    siblings: list[JobRecord],
    live_column: list[JobRecord],
    original_column: list[JobRecord] | None,
) -> Direction:
    if original_column is not None:
        # Within a column: moving down lands after the sibling, up before it.
        if _index_of(original_column, moved.id) < _index_of(original_column, sibling.id):
            return Direction.AFTER
        return Direction.BEFORE

    # Across columns: before the sibling, unless it is the last card and the
    # preview already shows the moved card below it.
    if siblings[-1].id == sibling.id:
        moved_index = _index_of(live_column, moved.id)
        if moved_index > _index_of(live_column, sibling.id):
            return Direction.AFTER
    return Direction.BEFORE


def _key_for_slot(siblings: list[JobRecord], index: int) -> str:
    """Generate a key for inserting at ``index`` of a column without the mover."""
    if not siblings:
        return key_between(None, None)
    if index >= len(siblings):
        return key_at_end(siblings[-1].order_key)

    after = siblings[index].order_key
    try:
        if index <= 0:
            return key_at_start(after)
        before = siblings[index - 1].order_key
        if before >= after:
            logger.debug(
                "Degenerate order keys %r >= %r, inserting before %r",
                before,
                after,
                after,
            )
            return key_at_start(after)
        try:
            return key_between(before, after)
        except OrderKeyError:
            return key_at_start(after)
    except OrderKeyError:
        # Nothing sorts below ``after`` (e.g. legacy "0"); share its key so
        # the record joins that group instead of leaving the top.
        logger.debug("No order key below %r, sharing it", after)
        return validate_order_key(after)


def _original_column(
    moved: RecordPosition, snapshot: list[JobRecord]
) -> list[JobRecord]:
    """The moved record's own column as it was before any preview."""
    restored = []
    found = False
    for record in snapshot:
        if record.id == moved.id:
            record = replace(record, status=moved.status, order_key=moved.order_key)
            found = True
        restored.append(record)
    column = sorted_records_in_column(moved.status, restored)
    if not found:
        # Not in the snapshot: place it by key alone.
        slot = sum(1 for record in column if record.order_key < moved.order_key)
        column.insert(slot, _placeholder(moved))
    return column


def _placeholder(moved: RecordPosition) -> JobRecord:
    return JobRecord(
        id=moved.id,
        company="",
        status=moved.status,
        order_key=moved.order_key,
        created_at=datetime.min,
    )


def _find(records: list[JobRecord], record_id: int) -> JobRecord | None:
    for record in records:
        if record.id == record_id:
            return record
    return None


def _index_of(records: list[JobRecord], record_id: int) -> int:
    for index, record in enumerate(records):
        if record.id == record_id:
            return index
    return -1
