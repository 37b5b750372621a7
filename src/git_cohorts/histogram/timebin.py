"""Calendar bins on the histogram's x axis.

A ``TimeBin`` is either a whole year (``month is None``) or a single month
of a year (``month`` in 0..11). Both granularities share one ordering:
by year, then month, with the whole-year bin sorting before month 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import total_ordering
from typing import Any, Iterator, Optional


@total_ordering
@dataclass(frozen=True)
class TimeBin:
    year: int
    month: Optional[int] = None  # 0-based

    def __post_init__(self) -> None:
        if self.month is not None and not 0 <= self.month <= 11:
            raise ValueError(f"month must be in 0..11, got {self.month}")

    # ── ordering ──────────────────────────────────────────────────────

    def _key(self) -> tuple[int, int]:
        return (self.year, -1 if self.month is None else self.month)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TimeBin):
            return NotImplemented
        return self._key() < other._key()

    def next(self) -> TimeBin:
        if self.month is None:
            return TimeBin(self.year + 1)
        if self.month == 11:
            return TimeBin(self.year + 1, 0)
        return TimeBin(self.year, self.month + 1)

    def prev(self) -> TimeBin:
        if self.month is None:
            return TimeBin(self.year - 1)
        if self.month == 0:
            return TimeBin(self.year - 1, 11)
        return TimeBin(self.year, self.month - 1)

    def first_of_year(self) -> TimeBin:
        """Month 0 of the same year; whole-year bins are returned unchanged."""
        if self.month is None:
            return self
        return TimeBin(self.year, 0)

    # ── wall-clock interval ───────────────────────────────────────────

    def begin_instant(self) -> datetime:
        """First instant covered by this bin."""
        return datetime(self.year, (self.month or 0) + 1, 1)

    def end_instant(self) -> datetime:
        """First instant after this bin (exclusive end)."""
        if self.month is None or self.month == 11:
            return datetime(self.year + 1, 1, 1)
        return datetime(self.year, self.month + 2, 1)

    def begin_timestamp(self) -> int:
        return int(self.begin_instant().replace(tzinfo=timezone.utc).timestamp())

    def end_timestamp(self) -> int:
        return int(self.end_instant().replace(tzinfo=timezone.utc).timestamp())

    # ── construction ──────────────────────────────────────────────────

    @classmethod
    def from_timestamp(cls, timestamp: int, monthly: bool = True, utc_offset: int = 0) -> TimeBin:
        """Truncate a unix timestamp to its bin, read in a fixed UTC offset (seconds).

        Commits are binned in their author's own offset, so a commit made
        just after local midnight on New Year's Day belongs to January.
        """
        dt = datetime.fromtimestamp(timestamp, tz=timezone(timedelta(seconds=utc_offset)))
        return cls(dt.year, dt.month - 1 if monthly else None)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimeBin:
        """Parse ``{"year": 2020, "month": 3}`` as found in project metadata."""
        month = data.get("month")
        return cls(int(data["year"]), None if month is None else int(month))

    @staticmethod
    def range(first: TimeBin, last: TimeBin) -> Iterator[TimeBin]:
        """Every bin from ``first`` to ``last`` inclusive, stepping by ``next()``."""
        current = first
        while current <= last:
            yield current
            current = current.next()

    def __str__(self) -> str:
        if self.month is None:
            return str(self.year)
        return f"{self.year}-{self.month + 1:02d}"
