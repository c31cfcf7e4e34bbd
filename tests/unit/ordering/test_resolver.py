"""Tests for drop resolution."""

from dataclasses import replace

import pytest

from src.ordering.keys import OrderKeyError, key_between
from src.ordering.resolver import RecordPosition, resolve_drop
from src.ordering.sorter import sorted_records_in_column
from src.ordering.targets import CardTarget, ColumnTarget, Direction, InvalidDropTargetError
from src.tracker.models import InvalidStatusError, JobStatus

WISHLIST = JobStatus.WISHLIST
APPLIED = JobStatus.APPLIED


@pytest.fixture
def wishlist(make_record):
    """WISHLIST holding a0, a1, a2; the oldest record sorts last."""
    return [
        make_record(1, WISHLIST, "a0", age=10),
        make_record(2, WISHLIST, "a1", age=20),
        make_record(3, WISHLIST, "a2", age=30),
    ]


def _keys(status, records):
    return [record.order_key for record in sorted_records_in_column(status, records)]


def _apply(records, record_id, result):
    return [
        replace(record, status=result.status, order_key=result.order_key)
        if record.id == record_id
        else record
        for record in records
    ]


class TestReorderWithinColumn:
    """Moves inside one column."""

    def test_moving_last_card_above_first(self, wishlist):
        moved = RecordPosition.of(wishlist[2])

        result = resolve_drop(moved, CardTarget(1), wishlist)

        assert result.status == WISHLIST
        assert result.order_key < "a0"
        assert result.status_changed is False
        assert result.order_changed is True
        assert _keys(WISHLIST, _apply(wishlist, 3, result)) == [
            result.order_key,
            "a0",
            "a1",
        ]

    def test_moving_down_lands_after_sibling(self, wishlist):
        moved = RecordPosition.of(wishlist[0])

        result = resolve_drop(moved, CardTarget(2), wishlist)

        assert "a1" < result.order_key < "a2"
        reordered = sorted_records_in_column(WISHLIST, _apply(wishlist, 1, result))
        assert [record.id for record in reordered] == [2, 1, 3]

    def test_moving_down_onto_last_card_lands_at_end(self, wishlist):
        moved = RecordPosition.of(wishlist[0])

        result = resolve_drop(moved, CardTarget(3), wishlist)

        assert result.order_key > "a2"

    def test_moving_up_lands_before_sibling(self, wishlist):
        moved = RecordPosition.of(wishlist[2])

        result = resolve_drop(moved, CardTarget(2), wishlist)

        assert "a0" < result.order_key < "a1"

    def test_explicit_direction_wins(self, wishlist):
        moved = RecordPosition.of(wishlist[2])

        result = resolve_drop(moved, CardTarget(1, Direction.AFTER), wishlist)

        assert "a0" < result.order_key < "a1"

    def test_drop_on_column_moves_to_end(self, wishlist):
        moved = RecordPosition.of(wishlist[0])

        result = resolve_drop(moved, ColumnTarget(WISHLIST), wishlist)

        assert result.order_key > "a2"
        assert result.status_changed is False


class TestNoOpDrops:
    """Drops that leave the record where it was."""

    def test_drop_on_itself(self, wishlist):
        moved = RecordPosition.of(wishlist[1])

        result = resolve_drop(moved, CardTarget(2), wishlist)

        assert result.status_changed is False
        assert result.order_changed is False
        assert result.is_noop

    @pytest.mark.parametrize(
        "target",
        [CardTarget(1, Direction.AFTER), CardTarget(3, Direction.BEFORE)],
    )
    def test_drop_next_to_neighbour_on_own_slot(self, wishlist, target):
        moved = RecordPosition.of(wishlist[1])

        result = resolve_drop(moved, target, wishlist)

        assert result.is_noop
        assert result.order_key == "a1"

    def test_last_card_dropped_on_own_column(self, wishlist):
        moved = RecordPosition.of(wishlist[2])

        result = resolve_drop(moved, ColumnTarget(WISHLIST), wishlist)

        assert result.is_noop

    def test_preview_elsewhere_then_back_to_own_slot(self, wishlist):
        """Change flags compare with pre-gesture values, not the preview."""
        moved = RecordPosition.of(wishlist[0])
        previewed = _apply(
            wishlist,
            1,
            resolve_drop(moved, ColumnTarget(APPLIED), wishlist),
        )

        result = resolve_drop(moved, CardTarget(2, Direction.BEFORE), previewed)

        assert result.is_noop
        assert result.status == WISHLIST
        assert result.order_key == "a0"


class TestCrossColumn:
    """Moves between columns."""

    def test_drop_into_empty_column(self, wishlist):
        moved = RecordPosition.of(wishlist[0])

        result = resolve_drop(moved, ColumnTarget(APPLIED), wishlist)

        assert result.status == APPLIED
        assert result.order_key == key_between(None, None)
        assert result.status_changed is True

    def test_drop_on_card_inserts_before_it(self, make_record, wishlist):
        records = wishlist + [
            make_record(10, APPLIED, "b0"),
            make_record(11, APPLIED, "b5"),
        ]
        moved = RecordPosition.of(wishlist[0])

        result = resolve_drop(moved, CardTarget(11), records)

        assert result.status == APPLIED
        assert "b0" < result.order_key < "b5"
        assert result.status_changed is True
        assert result.order_changed is True

    def test_drop_on_first_card_inserts_at_start(self, make_record, wishlist):
        records = wishlist + [
            make_record(10, APPLIED, "b0"),
            make_record(11, APPLIED, "b5"),
        ]
        moved = RecordPosition.of(wishlist[0])

        result = resolve_drop(moved, CardTarget(10), records)

        assert result.order_key < "b0"

    def test_drop_on_populated_column_appends(self, make_record, wishlist):
        records = wishlist + [make_record(10, APPLIED, "b0")]
        moved = RecordPosition.of(wishlist[0])

        result = resolve_drop(moved, ColumnTarget(APPLIED), records)

        assert result.order_key > "b0"

    def test_previewed_card_is_ignored_in_index_math(self, make_record, wishlist):
        """The preview copy of the moved card sits between b0 and b5."""
        records = [
            replace(wishlist[0], status=APPLIED, order_key="b1"),
            *wishlist[1:],
            make_record(10, APPLIED, "b0"),
            make_record(11, APPLIED, "b5"),
        ]
        moved = RecordPosition.of(wishlist[0])

        result = resolve_drop(moved, CardTarget(11), records)

        assert "b0" < result.order_key < "b5"
        assert result.order_key == key_between("b0", "b5")

    def test_last_card_with_preview_below_it_lands_after(self, make_record, wishlist):
        records = [
            replace(wishlist[0], status=APPLIED, order_key="c"),
            *wishlist[1:],
            make_record(10, APPLIED, "b0"),
            make_record(11, APPLIED, "b5"),
        ]
        moved = RecordPosition.of(wishlist[0])

        result = resolve_drop(moved, CardTarget(11), records)

        assert result.order_key > "b5"

    def test_self_drop_while_previewed_elsewhere(self, make_record, wishlist):
        records = [
            replace(wishlist[0], status=APPLIED, order_key="c"),
            *wishlist[1:],
            make_record(10, APPLIED, "b0"),
        ]
        moved = RecordPosition.of(wishlist[0])

        result = resolve_drop(moved, CardTarget(1), records)

        assert result.status == APPLIED
        assert result.order_key > "b0"
        assert result.status_changed is True


class TestDegenerateAndMissing:
    """Legacy keys and unknown targets."""

    def test_unknown_card_returns_none(self, wishlist):
        moved = RecordPosition.of(wishlist[0])

        assert resolve_drop(moved, CardTarget(999), wishlist) is None

    def test_duplicate_keys_insert_before_later_sibling(self, make_record):
        records = [
            make_record(1, APPLIED, "V"),
            make_record(2, WISHLIST, "a5", age=10),
            make_record(3, WISHLIST, "a5", age=20),
        ]
        moved = RecordPosition.of(records[0])

        result = resolve_drop(moved, CardTarget(3), records)

        assert result.status == WISHLIST
        assert result.order_key < "a5"

    def test_duplicate_floor_keys_do_not_raise(self, make_record):
        """No key sorts below "0"; the record shares it instead."""
        records = [
            make_record(1, APPLIED, "V"),
            make_record(2, WISHLIST, "0", age=10),
            make_record(3, WISHLIST, "0", age=20),
        ]
        moved = RecordPosition.of(records[0])

        result = resolve_drop(moved, CardTarget(3), records)

        assert result.status == WISHLIST
        assert result.order_key == "0"
        assert result.status_changed is True

    def test_move_to_top_of_floor_keys_stays_at_top(self, make_record):
        records = [
            make_record(1, WISHLIST, "0", age=10),
            make_record(2, WISHLIST, "0", age=20),
            make_record(3, WISHLIST, "a", age=30),
        ]
        moved = RecordPosition.of(records[2])

        result = resolve_drop(moved, CardTarget(1), records)

        assert result.order_key == "0"

    def test_reorder_among_floor_keys_is_a_noop(self, make_record):
        records = [
            make_record(1, WISHLIST, "0", age=10),
            make_record(2, WISHLIST, "0", age=20),
            make_record(3, WISHLIST, "0", age=30),
        ]
        moved = RecordPosition.of(records[2])

        result = resolve_drop(moved, CardTarget(1), records)

        assert result.is_noop

    def test_malformed_key_at_top_is_not_reused(self, make_record):
        records = [
            make_record(1, APPLIED, "V"),
            make_record(2, WISHLIST, "b-1"),
        ]
        moved = RecordPosition.of(records[0])

        with pytest.raises(OrderKeyError):
            resolve_drop(moved, CardTarget(2), records)

    def test_unknown_column_is_rejected(self, wishlist):
        moved = RecordPosition.of(wishlist[0])

        with pytest.raises(InvalidStatusError):
            resolve_drop(moved, ColumnTarget("ARCHIVED"), wishlist)

    def test_non_target_is_rejected(self, wishlist):
        moved = RecordPosition.of(wishlist[0])

        with pytest.raises(InvalidDropTargetError):
            resolve_drop(moved, "WISHLIST", wishlist)

    def test_does_not_mutate_snapshot(self, wishlist):
        before = list(wishlist)
        moved = RecordPosition.of(wishlist[2])

        resolve_drop(moved, CardTarget(1), wishlist)

        assert wishlist == before
