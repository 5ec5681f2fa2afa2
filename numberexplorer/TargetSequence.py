"""
TargetSequence - Ordered targets with a single forward-only cursor.

Items are immutable TargetItem values; advancing replaces the affected items
under a lock, so snapshot() never exposes a half-applied advance.

Invariants:
- cursor never decreases
- an item is active iff its index equals cursor (and cursor is in bounds)
- is_completed, once set, is never reset
"""
import logging
import threading
from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from numberexplorer.ChineseNumerals import chinese_label
from numberexplorer.types import TargetItem

logger = logging.getLogger(__name__)


class TargetSequence:
    """
    Fixed-length sequence of TargetItem with a movable cursor.

    Reads (snapshot, current_target) may come from any thread. Mutations via
    advance_if_match() must be serialized by the caller; ListeningSession is
    the only component that calls it.

    Attributes:
        _items: Current item values, replaced on advance
        _cursor: Index of the current target
        _lock: Guards _items and _cursor
    """

    def __init__(self, values: Iterable[int]):
        """
        Initialize TargetSequence with item 0 active.

        Args:
            values: Target values in learning order
        """
        self._items: List[TargetItem] = [
            TargetItem(
                value=value,
                digit_form=str(value),
                spoken_form=chinese_label(value),
            )
            for value in values
        ]
        if not self._items:
            raise ValueError("TargetSequence needs at least one value")
        if any(item.value < 0 for item in self._items):
            raise ValueError("Target values must be >= 0")

        self._items[0] = replace(self._items[0], is_active=True)
        self._cursor = 0
        self._lock = threading.Lock()

    @classmethod
    def from_range(cls, start: int = 0, stop: int = 100) -> "TargetSequence":
        """Build a sequence for the inclusive range start..stop."""
        if stop < start:
            raise ValueError(f"Empty target range: {start}..{stop}")
        return cls(range(start, stop + 1))

    def __len__(self) -> int:
        return len(self._items)

    @property
    def cursor(self) -> int:
        with self._lock:
            return self._cursor

    @property
    def is_exhausted(self) -> bool:
        with self._lock:
            return self._cursor >= len(self._items)

    def current_target(self) -> Optional[TargetItem]:
        """
        Returns:
            Item under the cursor, or None once the sequence is exhausted
        """
        with self._lock:
            if self._cursor >= len(self._items):
                return None
            return self._items[self._cursor]

    def snapshot(self) -> Tuple[TargetItem, ...]:
        """Consistent copy of all items for display."""
        with self._lock:
            return tuple(self._items)

    def advance_if_match(self, spoken_value: int) -> bool:
        """
        Complete the current item and move the cursor if spoken_value matches.

        Args:
            spoken_value: Value recognized in the transcript

        Returns:
            True if the current target matched and the cursor moved
        """
        with self._lock:
            if self._cursor >= len(self._items):
                return False

            current = self._items[self._cursor]
            if spoken_value != current.value:
                return False

            self._items[self._cursor] = replace(current, is_completed=True, is_active=False)
            self._cursor += 1
            if self._cursor < len(self._items):
                self._items[self._cursor] = replace(self._items[self._cursor], is_active=True)
            cursor = self._cursor

        logger.info("TargetSequence: completed %s, cursor=%s", spoken_value, cursor)
        return True
