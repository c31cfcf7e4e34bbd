"""Drag session controller.

Runs one drag gesture at a time against the board's live list of records:

    IDLE --start()--> ACTIVE --end()--> COMMITTED | CANCELLED --> IDLE

While a gesture is active, ``over()`` moves the card into the hovered
column of the live list so the board can show it there. That preview is
never persisted. On ``end()`` the final placement is resolved from the
position captured at ``start()``, applied to the live list, and handed
back as a ``PendingCommit`` for ``persist()`` to send to the store. The
session is gone before the request is in flight, so the next gesture can
start straight away.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Protocol

from src.board.notices import Notice, Notifier, log_notice
from src.ordering.resolver import RecordPosition, resolve_drop
from src.ordering.targets import CardTarget, ColumnTarget, DropResult, DropTarget
from src.tracker.models import JobRecord, JobStatus, PositionUpdate
from src.tracker.service import PersistenceError

logger = logging.getLogger(__name__)


class DragState(str, Enum):
    """States of the drag session controller."""

    IDLE = "idle"
    ACTIVE = "active"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


class DragStateError(RuntimeError):
    """Raised when a transition is not legal in the current state."""


class PersistenceClient(Protocol):
    """Store that applies a new position to one record atomically.

    ``update_position`` returns True when the move was stored and False when
    the store rejected it (for example, the record no longer exists). Store
    failures are raised as ``PersistenceError``. Any failure leaves the
    stored record unchanged.
    """

    async def update_position(self, record_id: int, update: PositionUpdate) -> bool:
        ...


class SnapshotProvider(Protocol):
    """Source of the authoritative list of records."""

    async def list_jobs(self) -> list[JobRecord]:
        ...


@dataclass(frozen=True)
class DragSession:
    """The ephemeral state of one gesture.

    Attributes:
        original: Position captured at start; used for no-op detection and
            rollback, never replaced during the gesture.
        preview_status: Column the card is currently shown in.
        pointer_target: Last target reported by ``over()``.
    """

    original: RecordPosition
    preview_status: JobStatus
    pointer_target: DropTarget | None = None

    @property
    def record_id(self) -> int:
        return self.original.id


@dataclass(frozen=True)
class PendingCommit:
    """An optimistic move that still has to be persisted."""

    original: RecordPosition
    update: PositionUpdate

    @property
    def record_id(self) -> int:
        return self.original.id


@dataclass(frozen=True)
class DragOutcome:
    """What a finished gesture did.

    ``state`` is COMMITTED when a persist request is pending and
    CANCELLED for drops outside the board and for no-op drops.
    """

    state: DragState
    record_id: int
    result: DropResult | None = None
    pending: PendingCommit | None = None

    @property
    def is_noop(self) -> bool:
        return self.pending is None and self.result is not None and self.result.is_noop


class DragSessionController:
    """Owns the live board list and the lifecycle of drag gestures."""

    def __init__(
        self,
        records: Iterable[JobRecord],
        persistence: PersistenceClient,
        snapshots: SnapshotProvider,
        notifier: Notifier | None = None,
        notice_duration_seconds: float = 4.0,
    ):
        """Initialize the controller.

        Args:
            records: Initial snapshot of the board.
            persistence: Store that accepts position updates.
            snapshots: Source of the authoritative list after a commit.
            notifier: Receives user-facing failure notices (defaults to the log).
            notice_duration_seconds: Display time for failure notices.
        """
        self._records: list[JobRecord] = list(records)
        self._persistence = persistence
        self._snapshots = snapshots
        self._notifier = notifier or log_notice
        self._notice_duration = notice_duration_seconds
        self._session: DragSession | None = None

    @property
    def records(self) -> list[JobRecord]:
        """A copy of the live list, including any preview."""
        return list(self._records)

    @property
    def session(self) -> DragSession | None:
        return self._session

    @property
    def state(self) -> DragState:
        return DragState.ACTIVE if self._session is not None else DragState.IDLE

    def get_record(self, record_id: int) -> JobRecord | None:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def start(self, record: JobRecord | int) -> DragSession:
        """Begin a gesture on a record of the live list.

        Raises:
            DragStateError: If a gesture is already active.
            LookupError: If the record is not on the board.
        """
        if self._session is not None:
            raise DragStateError(
                f"Cannot start a drag while job {self._session.record_id} is being dragged"
            )
        record_id = record.id if isinstance(record, JobRecord) else record
        current = self.get_record(record_id)
        if current is None:
            raise LookupError(f"Job {record_id} is not on the board")

        self._session = DragSession(
            original=RecordPosition.of(current),
            preview_status=current.status,
        )
        logger.debug("Drag started for job %s in %s", record_id, current.status.value)
        return self._session

    def over(self, target: DropTarget) -> DropTarget | None:
        """Report the target under the pointer.

        Moves the card into the hovered column of the live list when that
        column differs from the one it is shown in.

        Returns:
            The target, to be handed to ``end()`` on release, or None when
            no gesture is active.
        """
        session = self._session
        if session is None:
            return None

        hovered = self._hovered_status(target)
        displayed = self.get_record(session.record_id)
        if (
            hovered is not None
            and displayed is not None
            and hovered != session.preview_status
        ):
            preview = resolve_drop(
                RecordPosition.of(displayed), ColumnTarget(hovered), self._records
            )
            self._set_position(session.record_id, preview.status, preview.order_key)
            session = replace(session, preview_status=hovered)

        self._session = replace(session, pointer_target=target)
        return target

    def end(self, target: DropTarget | None) -> DragOutcome:
        """Finish the gesture.

        Args:
            target: The target the card was released on, or None when it
                was released outside any column.

        Returns:
            The outcome. When ``outcome.pending`` is set the live list
            already shows the move and ``persist()`` must be awaited.

        Raises:
            DragStateError: If no gesture is active.
            InvalidStatusError: If a column target names an unknown column.
            OrderKeyError: If a stored sibling key is malformed.

        On any resolution error the record is restored before the error
        propagates.
        """
        session = self._session
        if session is None:
            raise DragStateError("No drag in progress")
        self._session = None
        original = session.original

        if target is None:
            self._restore(original)
            logger.debug("Drag of job %s cancelled", original.id)
            return DragOutcome(state=DragState.CANCELLED, record_id=original.id)

        try:
            result = resolve_drop(original, target, self._records)
            if result is None:
                logger.info(
                    "Drop target %r not found, moving job %s to the end of %s",
                    target,
                    original.id,
                    session.preview_status.value,
                )
                result = resolve_drop(
                    original, ColumnTarget(session.preview_status), self._records
                )
        except Exception:
            # The session is already gone; the preview must go too.
            self._restore(original)
            raise

        if result.is_noop:
            self._restore(original)
            return DragOutcome(
                state=DragState.CANCELLED, record_id=original.id, result=result
            )

        self._set_position(original.id, result.status, result.order_key)
        pending = PendingCommit(
            original=original,
            update=PositionUpdate(status=result.status, order_key=result.order_key),
        )
        logger.debug(
            "Job %s moved to %s at %r", original.id, result.status.value, result.order_key
        )
        return DragOutcome(
            state=DragState.COMMITTED,
            record_id=original.id,
            result=result,
            pending=pending,
        )

    def cancel(self) -> DragOutcome:
        """Abort the active gesture; same as releasing outside the board."""
        return self.end(None)

    async def persist(self, pending: PendingCommit) -> bool:
        """Send a committed move to the store.

        On success the live list is refreshed from the snapshot provider. On
        failure the record is put back exactly where the gesture found it and
        a notice is emitted. Failures are not retried.

        Returns:
            True if the store accepted the move, False if it rejected the
            move or raised ``PersistenceError``.

        Raises:
            Exception: Any other error from the persistence client, re-raised
                after the rollback and the notice.
        """
        try:
            accepted = await self._persistence.update_position(
                pending.record_id, pending.update
            )
        except PersistenceError as e:
            logger.warning(f"Failed to save position of job {pending.record_id}: {e}")
            accepted = False
        except Exception:
            logger.exception(f"Unexpected error saving position of job {pending.record_id}")
            self._roll_back(pending)
            raise

        if not accepted:
            self._roll_back(pending)
            return False

        await self.refresh()
        saved = self.get_record(pending.record_id)
        if saved is not None and (
            saved.status != pending.update.status
            or saved.order_key != pending.update.order_key
        ):
            logger.warning(
                "Job %s was saved as %s/%r but the store now has %s/%r",
                pending.record_id,
                pending.update.status.value,
                pending.update.order_key,
                saved.status.value,
                saved.order_key,
            )
        return True

    async def drop(self, target: DropTarget | None) -> DragOutcome:
        """End the gesture and persist the move, if any."""
        outcome = self.end(target)
        if outcome.pending is not None:
            await self.persist(outcome.pending)
        return outcome

    async def refresh(self) -> list[JobRecord]:
        """Replace the live list with the authoritative snapshot.

        A card being dragged keeps its displayed position.
        """
        try:
            fresh = await self._snapshots.list_jobs()
        except PersistenceError as e:
            logger.warning(f"Failed to refresh the board: {e}")
            return self.records
        self.load(fresh)
        return self.records

    def load(self, records: Iterable[JobRecord]) -> None:
        """Replace the live list, keeping an in-progress preview."""
        fresh = list(records)
        session = self._session
        if session is not None:
            displayed = self.get_record(session.record_id)
            if displayed is not None:
                fresh = [
                    replace(
                        record,
                        status=displayed.status,
                        order_key=displayed.order_key,
                    )
                    if record.id == session.record_id
                    else record
                    for record in fresh
                ]
        self._records = fresh

    def _hovered_status(self, target: DropTarget) -> JobStatus | None:
        if isinstance(target, ColumnTarget):
            return JobStatus.parse(target.status)
        if isinstance(target, CardTarget):
            card = self.get_record(target.record_id)
            return card.status if card is not None else None
        return None

    def _roll_back(self, pending: PendingCommit) -> None:
        self._restore(pending.original)
        self._notifier(
            Notice(
                message="Could not move the job. Your change was undone.",
                duration_seconds=self._notice_duration,
                record_id=pending.record_id,
            )
        )

    def _restore(self, original: RecordPosition) -> None:
        self._set_position(original.id, original.status, original.order_key)

    def _set_position(self, record_id: int, status: JobStatus, order_key: str) -> None:
        self._records = [
            replace(record, status=status, order_key=order_key)
            if record.id == record_id
            else record
            for record in self._records
        ]
