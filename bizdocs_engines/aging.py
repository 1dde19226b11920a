"""
Module: bizdocs_engines.aging
Responsibility:
    Count whole days past a document's due date and label that count with
    an aging bucket (``Current``, ``1-30``, ... ``Over 90``) for the
    receivable and payable views.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - The as-of date is always passed in; nothing here reads a clock.
    - Days are counted between calendar dates, never timestamps.
    - For a fixed due date, a later as-of date never gives fewer days
      overdue.
    - A bucket set must cover every day count from 0 upward with no gaps
      or overlaps, so ``classify`` always finds exactly one bucket.

Failure modes:
    - ValueError from ``AgeBucket`` for a negative or inverted range.
    - ValueError from ``AgingCalculator`` for a bucket set with gaps,
      overlaps or a bounded last bucket.

Usage:
    from datetime import date
    from bizdocs_engines.aging import AgingCalculator

    calculator = AgingCalculator()
    days = calculator.days_overdue(date(2024, 1, 15), date(2024, 2, 15))  # 31
    calculator.classify(days).name  # "31-60"
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Sequence


@dataclass(frozen=True)
class AgeBucket:
    """Inclusive range of days overdue; ``max_days=None`` is open-ended."""

    name: str
    min_days: int
    max_days: int | None

    def __post_init__(self) -> None:
        if self.min_days < 0:
            raise ValueError(f"Bucket {self.name!r} starts below zero days")
        if self.max_days is not None and self.max_days < self.min_days:
            raise ValueError(f"Bucket {self.name!r} ends before it starts")

    def contains(self, days: int) -> bool:
        return self.min_days <= days and (self.max_days is None or days <= self.max_days)


STANDARD_BUCKETS: tuple[AgeBucket, ...] = (
    AgeBucket("Current", 0, 0),
    AgeBucket("1-30", 1, 30),
    AgeBucket("31-60", 31, 60),
    AgeBucket("61-90", 61, 90),
    AgeBucket("Over 90", 91, None),
)


def _check_coverage(buckets: tuple[AgeBucket, ...]) -> None:
    if not buckets:
        raise ValueError("At least one aging bucket is required")
    expected_start = 0
    for bucket in buckets:
        if expected_start is None or bucket.min_days != expected_start:
            raise ValueError(
                f"Bucket {bucket.name!r} starts at {bucket.min_days} days; "
                f"expected {expected_start} so that buckets cover every age"
            )
        expected_start = None if bucket.max_days is None else bucket.max_days + 1
    if buckets[-1].max_days is not None:
        raise ValueError(f"Last bucket {buckets[-1].name!r} must be open-ended")


class AgingCalculator:
    """Days-overdue arithmetic plus bucket lookup over a contiguous bucket set."""

    def __init__(self, buckets: Sequence[AgeBucket] | None = None):
        self._buckets = tuple(buckets) if buckets else STANDARD_BUCKETS
        _check_coverage(self._buckets)

    @property
    def buckets(self) -> tuple[AgeBucket, ...]:
        return self._buckets

    def calculate_age(self, reference_date: date, as_of_date: date) -> int:
        """Signed whole days from ``reference_date`` to ``as_of_date``."""
        return (as_of_date - reference_date).days

    def days_overdue(self, due_date: date | None, as_of_date: date) -> int:
        """Whole days past due; 0 without a due date or on/before it."""
        if due_date is None:
            return 0
        return max(0, self.calculate_age(due_date, as_of_date))

    def classify(self, days: int) -> AgeBucket:
        """Bucket holding ``days``; a not-yet-due (negative) count is current."""
        days = max(0, days)
        for bucket in self._buckets:
            if bucket.contains(days):
                return bucket
        # Coverage is checked in __init__, so the last bucket is open-ended.
        return self._buckets[-1]
