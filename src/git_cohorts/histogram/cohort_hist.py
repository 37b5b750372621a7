"""Sparse (time bin, cohort) histogram and its delimited-table export."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Optional

from ..exceptions import DuplicateValueError, EmptyHistogramError
from .timebin import TimeBin

# Brief contributors. Always the lowest cohort id.
NO_COHORT = -1

# Overflow bucket of categorical histograms ("Other").
OTHER_COHORT = 0

BLANK_NAME = "(blank)"


@dataclass(frozen=True)
class HistogramBounds:
    min_bin: TimeBin
    max_bin: TimeBin
    min_cohort: int
    max_cohort: int


class CohortHistogram:
    """Integer values keyed by ``(TimeBin, cohort id)`` plus cohort names.

    Cells that were never written read as ``None`` from :meth:`get` and as
    zero in exports. Each cell may be written once with :meth:`set`; use
    :meth:`add` to accumulate.
    """

    def __init__(self) -> None:
        self._bins: dict[TimeBin, dict[int, int]] = defaultdict(dict)
        self._names: dict[int, str] = {}
        self._min_cohort: Optional[int] = None
        self._max_cohort: Optional[int] = None

    # ── values ────────────────────────────────────────────────────────

    def set(self, time_bin: TimeBin, cohort: int, value: int) -> None:
        cells = self._bins[time_bin]
        if cohort in cells:
            raise DuplicateValueError(time_bin, cohort, cells[cohort], value)
        self._track(cohort)
        cells[cohort] = int(value)

    def add(self, time_bin: TimeBin, cohort: int, value: int) -> None:
        """Accumulate ``value`` into a cell, creating it if needed."""
        cells = self._bins[time_bin]
        self._track(cohort)
        cells[cohort] = cells.get(cohort, 0) + int(value)

    def get(self, time_bin: TimeBin, cohort: int) -> Optional[int]:
        cells = self._bins.get(time_bin)
        if cells is None:
            return None
        return cells.get(cohort)

    def _track(self, cohort: int) -> None:
        if cohort == NO_COHORT:
            return
        if self._min_cohort is None or cohort < self._min_cohort:
            self._min_cohort = cohort
        if self._max_cohort is None or cohort > self._max_cohort:
            self._max_cohort = cohort

    # ── names ─────────────────────────────────────────────────────────

    def set_name(self, cohort: int, name: str) -> None:
        name = name.strip()
        self._names[cohort] = name or BLANK_NAME

    def get_name(self, cohort: int) -> str:
        return self._names.get(cohort, "")

    # ── shape ─────────────────────────────────────────────────────────

    def bounds(self) -> Optional[HistogramBounds]:
        """Bin and cohort extents, or ``None`` if nothing was ever written."""
        if not self._bins:
            return None
        # Cohort bounds stay empty when only the Brief bucket holds data
        min_cohort = self._min_cohort if self._min_cohort is not None else 0
        max_cohort = self._max_cohort if self._max_cohort is not None else -1
        return HistogramBounds(
            min_bin=min(self._bins),
            max_bin=max(self._bins),
            min_cohort=min_cohort,
            max_cohort=max_cohort,
        )

    @property
    def n_cohorts(self) -> int:
        if self._min_cohort is None or self._max_cohort is None:
            return 0
        return self._max_cohort - self._min_cohort + 1

    @property
    def has_named_sentinel(self) -> bool:
        return bool(self.get_name(NO_COHORT))

    # ── export ────────────────────────────────────────────────────────

    def to_rows(self) -> list[tuple[TimeBin, list[tuple[int, int]]]]:
        """Gap-free rows from the first bin's year start to the last bin.

        Each row starts with ``(NO_COHORT, sum of the bin)`` followed by one
        ``(cohort, value)`` per cohort id in bounds, and a trailing
        ``(NO_COHORT, value)`` column when the sentinel has a name.
        """
        b = self.bounds()
        if b is None:
            return []

        rows = []
        for time_bin in TimeBin.range(b.min_bin.first_of_year(), b.max_bin):
            cells = self._bins.get(time_bin, {})
            row = [(NO_COHORT, sum(cells.values()))]
            row.extend(
                (cohort, cells.get(cohort, 0))
                for cohort in range(b.min_cohort, b.max_cohort + 1)
            )
            if self.has_named_sentinel:
                row.append((NO_COHORT, cells.get(NO_COHORT, 0)))
            rows.append((time_bin, row))
        return rows

    def header(self, delimiter: str = "|") -> str:
        b = self.bounds()
        if b is None:
            raise EmptyHistogramError()

        columns = ["Year", "Month", "Sum"] if b.min_bin.month is not None else ["Year", "Sum"]
        for cohort in range(b.min_cohort, b.max_cohort + 1):
            # Empty column names break gnuplot's columnheader()
            columns.append(self.get_name(cohort) or BLANK_NAME)
        if self.has_named_sentinel:
            columns.append(self.get_name(NO_COHORT))
        return delimiter.join(columns)

    def to_table(self, delimiter: str = "|") -> str:
        """Render :meth:`to_rows` as a delimited table with a header row."""
        lines = [self.header(delimiter)]
        for time_bin, row in self.to_rows():
            prefix = [str(time_bin.year)]
            if time_bin.month is not None:
                prefix.append(str(time_bin.month))
            lines.append(delimiter.join(prefix + [str(value) for _, value in row]))
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"CohortHistogram(bins={len(self._bins)}, cohorts={self.n_cohorts})"
