"""Shared enums and data models for git-cohorts"""

from dataclasses import dataclass
from enum import Enum

SECONDS_PER_DAY = 60 * 60 * 24


class CohortType(str, Enum):
    """How authors are bucketed on the y axis."""

    TENURE = "tenure"  # calendar year of the author's first commit
    DOMAIN = "domain"  # organisation e-mail domain
    REPO = "repo"  # repository name
    SUFFIX = "suffix"  # file-type suffix of changed paths

    @property
    def is_categorical(self) -> bool:
        return self is not CohortType.TENURE


class UnitType(str, Enum):
    """What is counted per (bin, cohort)."""

    AUTHORS = "authors"
    EVENTS = "events"
    SIZE = "size"  # insertions + deletions

    @property
    def label(self) -> str:
        return {
            UnitType.AUTHORS: "Authors",
            UnitType.EVENTS: "Commits",
            UnitType.SIZE: "Changes",
        }[self]


class IntervalType(str, Enum):
    """Granularity of the x axis."""

    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class AuthorSummary:
    """Per-author tenure summary, recomputed on every aggregation run."""

    author_name: str
    first_time: int  # unix seconds
    first_year: int
    last_time: int
    last_year: int
    active_time: int  # last_time - first_time, seconds
    n_events: int
    n_changes: int

    @property
    def active_days(self) -> float:
        return self.active_time / SECONDS_PER_DAY

    def is_brief(self, threshold_days: int) -> bool:
        """Short-tenure authors are reported in the Brief bucket."""
        return self.active_time <= threshold_days * SECONDS_PER_DAY
