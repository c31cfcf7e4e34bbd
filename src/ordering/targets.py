"""Drop targets and drop results."""

from dataclasses import dataclass
from enum import Enum

from src.tracker.models import JobStatus


class InvalidDropTargetError(ValueError):
    """Raised when a raw drop id is neither a column nor a card."""


class Direction(str, Enum):
    """Side of a sibling card that a dropped card lands on."""

    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class ColumnTarget:
    """The empty background of a column; drops land at the column's end."""

    status: JobStatus


@dataclass(frozen=True)
class CardTarget:
    """A sibling card.

    Attributes:
        record_id: Id of the card under the pointer.
        direction: Explicit side to land on. When None the side is
            recomputed from the pre-gesture positions.
    """

    record_id: int
    direction: Direction | None = None


DropTarget = ColumnTarget | CardTarget


def parse_drop_target(raw_id: str | int) -> DropTarget:
    """Classify a raw droppable id as a column or a card.

    Column names map to ``ColumnTarget``; integers and integer strings map
    to ``CardTarget``.

    Raises:
        InvalidDropTargetError: For any other value.
    """
    if JobStatus.is_status(raw_id):
        return ColumnTarget(JobStatus(raw_id))
    if isinstance(raw_id, bool):
        raise InvalidDropTargetError(f"Invalid drop target: {raw_id!r}")
    if isinstance(raw_id, int):
        return CardTarget(raw_id)
    if isinstance(raw_id, str) and raw_id.strip().isdigit():
        return CardTarget(int(raw_id.strip()))
    raise InvalidDropTargetError(f"Invalid drop target: {raw_id!r}")


@dataclass(frozen=True)
class DropResult:
    """Where a dropped record ends up.

    ``status_changed`` and ``order_changed`` compare against the record's
    pre-gesture values.
    """

    status: JobStatus
    order_key: str
    status_changed: bool
    order_changed: bool

    @property
    def is_noop(self) -> bool:
        """True when the drop leaves the record exactly where it was."""
        return not self.status_changed and not self.order_changed
