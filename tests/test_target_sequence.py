"""Tests for TargetSequence cursor and item flags."""
import threading

import pytest

from numberexplorer.TargetSequence import TargetSequence


class TestTargetSequenceConstruction:

    def test_from_range_builds_inclusive_range_with_first_item_active(self):
        sequence = TargetSequence.from_range(0, 100)

        items = sequence.snapshot()
        assert len(sequence) == 101
        assert [item.value for item in items] == list(range(101))
        assert sequence.cursor == 0
        assert items[0].is_active
        assert not any(item.is_active for item in items[1:])
        assert not any(item.is_completed for item in items)

    def test_items_carry_digit_and_chinese_forms(self):
        items = TargetSequence.from_range(0, 100).snapshot()

        assert items[23].digit_form == "23"
        assert items[23].spoken_form == "二十三"
        assert items[100].spoken_form == "一百"

    def test_empty_range_rejected(self):
        with pytest.raises(ValueError):
            TargetSequence.from_range(5, 4)

    def test_empty_values_rejected(self):
        with pytest.raises(ValueError):
            TargetSequence([])


class TestAdvanceIfMatch:

    def test_matching_value_advances_exactly_one(self):
        """Logic: for every target, a match completes one item and activates the next."""
        sequence = TargetSequence.from_range(0, 100)

        for target in range(101):
            before = sequence.snapshot()
            assert sequence.advance_if_match(target) is True

            after = sequence.snapshot()
            assert sequence.cursor == target + 1
            changed = [i for i in range(len(after)) if before[i] != after[i]]
            assert after[target].is_completed and not after[target].is_active
            if target < 100:
                assert after[target + 1].is_active
                assert changed == [target, target + 1]
            else:
                assert changed == [target]
            assert sum(item.is_active for item in after) == (0 if target == 100 else 1)

    def test_non_matching_value_leaves_sequence_unchanged(self):
        sequence = TargetSequence.from_range(0, 100)
        sequence.advance_if_match(0)
        before = sequence.snapshot()

        assert sequence.advance_if_match(5) is False
        assert sequence.advance_if_match(0) is False

        assert sequence.snapshot() == before
        assert sequence.cursor == 1

    def test_exhausted_sequence_returns_false(self):
        sequence = TargetSequence.from_range(0, 1)
        sequence.advance_if_match(0)
        sequence.advance_if_match(1)

        assert sequence.is_exhausted
        assert sequence.current_target() is None
        before = sequence.snapshot()
        assert sequence.advance_if_match(1) is False
        assert sequence.snapshot() == before
        assert sequence.cursor == 2

    def test_current_target_follows_cursor(self):
        sequence = TargetSequence.from_range(0, 100)
        sequence.advance_if_match(0)

        assert sequence.current_target().value == 1

    def test_snapshots_never_show_partial_advance(self):
        """Logic: readers racing an advancing writer always see exactly one active item."""
        sequence = TargetSequence.from_range(0, 100)
        problems = []

        def reader():
            for _ in range(500):
                items = sequence.snapshot()
                active = [i for i, item in enumerate(items) if item.is_active]
                completed = sum(item.is_completed for item in items)
                if len(active) > 1 or (active and active[0] != completed):
                    problems.append(items)

        thread = threading.Thread(target=reader)
        thread.start()
        for target in range(100):
            sequence.advance_if_match(target)
        thread.join()

        assert problems == []
