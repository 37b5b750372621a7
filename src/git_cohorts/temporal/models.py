"""Data models for revision-history ingestion."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class RawCommit:
    """One commit as read from ``git log``.

    Timestamps are unix seconds; ``None`` when git emitted something that
    could not be parsed. Such commits are stored but never cohorted.
    ``author_offset`` is the author's UTC offset in seconds at commit time,
    used to place the commit in the author's local month and year.
    """

    id: str
    repo_name: str
    author_name: str = ""
    author_email: str = ""
    author_time: Optional[int] = None
    author_offset: int = 0
    committer_name: str = ""
    committer_email: str = ""
    committer_time: Optional[int] = None
    n_insertions: int = 0
    n_deletions: int = 0
    n_changes_per_suffix: dict[str, int] = field(default_factory=dict)
