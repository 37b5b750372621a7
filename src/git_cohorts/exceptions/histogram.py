"""Histogram-related exceptions: duplicate writes, empty exports."""

from typing import Any

from .base import GitCohortsError


class HistogramError(GitCohortsError):
    """Base class for cohort histogram errors."""

    pass


class DuplicateValueError(HistogramError):
    """Raised when a (bin, cohort) cell is written twice."""

    def __init__(self, time_bin: Any, cohort: int, existing: int, value: int):
        super().__init__(
            f"Value for {time_bin} / cohort {cohort} already set",
            details={"existing": str(existing), "new": str(value)},
        )
        self.time_bin = time_bin
        self.cohort = cohort
        self.existing = existing
        self.value = value


class EmptyHistogramError(HistogramError):
    """Raised when exporting a histogram that has no data."""

    def __init__(self, reason: str = "histogram has no bins"):
        super().__init__("Cannot export empty histogram", details={"reason": reason})
