# backend/models/intervals.py
"""
Labelled half-open ranges and the ordered, non-overlapping set that holds them.

An Interval is [start, end) tagged with a display category. SortedIntervals
keeps them ascending by start; `index` is derived from the storage position
and rewritten after every insertion.
"""

import logging
from typing import Callable, Generic, Iterator, List, Optional, TypeVar, Union

from pydantic import BaseModel

from services.errors import InvalidIntervalError, OverlapError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# int for integer columns (the price domain), float otherwise
Number = Union[int, float]


class Interval(BaseModel, Generic[T]):
    column: str
    start: T
    end: T
    category: str
    index: int = 0


class StatInterval(BaseModel):
    """
    Trimmed vs. original bounds of one column under one filter.
    """
    column: str
    orig_start: Number
    orig_end: Number
    rsd: int
    count: int
    start: Number
    end: Number

    model_config = {"frozen": True}


class SortedIntervals(Generic[T]):

    def __init__(self, column: str = "", intervals: Optional[List[Interval[T]]] = None):
        self.column = column
        self._intervals: List[Interval[T]] = []
        for interval in intervals or []:
            self.add_interval(interval)

    @classmethod
    def from_intervals(cls, intervals: List[Interval[T]], column: Optional[str] = None) -> "SortedIntervals[T]":
        """
        Build a set by inserting each interval in the given order.
        The first conflicting element raises and nothing is returned.
        """
        if column is None:
            column = intervals[0].column if intervals else ""
        return cls(column, intervals)

    # ============================================================
    #  INSERTION
    # ============================================================

    def add_interval(self, interval: Interval[T]) -> None:
        """
        Insert an interval at its sorted position.

        The very first interval is accepted as-is, without the start <= end
        check. Raises InvalidIntervalError for a reversed interval and
        OverlapError when it does not fit between its neighbours.
        """
        if not self._intervals:
            self._intervals.append(interval.model_copy())
            self._reindex()
            return

        if interval.start > interval.end:
            raise InvalidIntervalError(f"Invalid interval {interval!r}")

        lowest = min(i.start for i in self._intervals)
        highest = max(i.end for i in self._intervals)

        if interval.end <= lowest:
            self._intervals.insert(0, interval.model_copy())
        elif interval.start >= highest:
            self._intervals.append(interval.model_copy())
        else:
            self._insert_between(interval)

        self._reindex()

    def _insert_between(self, interval: Interval[T]) -> None:
        duplicate = next(
            (i for i in self._intervals if i.start == interval.start and i.end == interval.end),
            None,
        )
        if duplicate is not None:
            raise OverlapError(f"Interval {interval!r} is already present as {duplicate!r}")

        left_pos = None
        right_pos = None
        for pos, existing in enumerate(self._intervals):
            if existing.end <= interval.start:
                if left_pos is None or existing.end > self._intervals[left_pos].end:
                    left_pos = pos
            if existing.start >= interval.end:
                if right_pos is None or existing.start < self._intervals[right_pos].start:
                    right_pos = pos

        left = self._intervals[left_pos] if left_pos is not None else None
        right = self._intervals[right_pos] if right_pos is not None else None

        if right is None and left is not None:
            # Open question: the lower neighbour is duplicated in place of the
            # new interval. Kept until the product owner decides otherwise.
            logger.warning(
                "No upper neighbour for %r, appending a copy of %r instead",
                interval, left,
            )
            self._intervals.append(left.model_copy())
            return

        if left is None or right is None:
            raise OverlapError(
                f"Overlap for {interval!r}. left: {left!r}, right: {right!r}"
            )

        # left/right alone can straddle an interval that sits between them
        blocking = next((i for i in self._intervals if i.start < interval.end and i.end > interval.start), None)
        if blocking is not None:
            raise OverlapError(f"Overlap between {interval!r} and {blocking!r}")

        if interval.start >= left.end and interval.end <= right.start:
            self._intervals.insert(right_pos, interval.model_copy())
        else:
            raise OverlapError(f"Overlap between {interval!r} and {right!r}")

    def _reindex(self) -> None:
        for pos, interval in enumerate(self._intervals):
            interval.index = pos

    # ============================================================
    #  ACCESS
    # ============================================================

    def sort_intervals(self, key: Optional[Callable[[Interval[T]], object]] = None) -> None:
        """Re-sort by start, or by the supplied key."""
        self._intervals.sort(key=key or (lambda i: i.start))
        self._reindex()

    def min(self) -> Optional[Interval[T]]:
        if not self._intervals:
            return None
        return min(self._intervals, key=lambda i: i.start)

    def max(self) -> Optional[Interval[T]]:
        if not self._intervals:
            return None
        return max(self._intervals, key=lambda i: i.end)

    def get_interval(self, index: int) -> Optional[Interval[T]]:
        if 0 <= index < len(self._intervals):
            return self._intervals[index]
        return None

    @property
    def intervals(self) -> List[Interval[T]]:
        return list(self._intervals)

    def categories(self) -> List[str]:
        return [i.category for i in self._intervals]

    def values(self) -> List[T]:
        """Sorted, de-duplicated boundary values of every interval."""
        return sorted({v for i in self._intervals for v in (i.start, i.end)})

    def is_empty(self) -> bool:
        return not self._intervals

    def __len__(self) -> int:
        return len(self._intervals)

    def __iter__(self) -> Iterator[Interval[T]]:
        return iter(self._intervals)

    def __repr__(self) -> str:
        return f"SortedIntervals(column={self.column!r}, intervals={self._intervals!r})"
