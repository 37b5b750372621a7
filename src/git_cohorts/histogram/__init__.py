"""Time bins and the cohort histogram they key."""

from .cohort_hist import NO_COHORT, OTHER_COHORT, CohortHistogram, HistogramBounds
from .timebin import TimeBin

__all__ = [
    "CohortHistogram",
    "HistogramBounds",
    "NO_COHORT",
    "OTHER_COHORT",
    "TimeBin",
]
