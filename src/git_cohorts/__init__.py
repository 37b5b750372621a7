"""
git-cohorts - Contributor cohort histograms from git history

Buckets the authors of one or more repositories into cohorts (year of first
contribution, e-mail domain, repository or file type) and counts their
activity per month or year as stacked histograms.
"""

__version__ = "0.1.0"

from .aggregation import CohortEngine, compute_histogram
from .config import CohortConfig, load_config
from .histogram import NO_COHORT, OTHER_COHORT, CohortHistogram, TimeBin
from .models import CohortType, IntervalType, UnitType
from .persistence import CommitDB

__all__ = [
    "compute_histogram",  # Main entry point
    "CohortEngine",
    "CohortConfig",
    "load_config",
    "CohortHistogram",
    "TimeBin",
    "NO_COHORT",
    "OTHER_COHORT",
    "CohortType",
    "UnitType",
    "IntervalType",
    "CommitDB",
]
