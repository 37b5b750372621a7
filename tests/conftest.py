"""Shared test fixtures for git-cohorts tests."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from git_cohorts.persistence import CommitDB
from git_cohorts.temporal import RawCommit

_counter = iter(range(1, 1_000_000))


def ts(year: int, month: int = 1, day: int = 1) -> int:
    """Unix timestamp of midnight UTC on the given (1-based month) date."""
    return int(datetime(year, month, day, tzinfo=timezone.utc).timestamp())


def days_after(timestamp: int, days: int) -> int:
    return timestamp + int(timedelta(days=days).total_seconds())


def make_commit(
    author: str,
    author_time: Optional[int],
    email: Optional[str] = None,
    repo: str = "core",
    suffixes: Optional[dict] = None,
    insertions: int = 1,
    deletions: int = 0,
    sha: Optional[str] = None,
    offset: int = 0,
) -> RawCommit:
    """Create a test commit with a unique hash."""
    return RawCommit(
        id=sha or f"{next(_counter):040x}",
        repo_name=repo,
        author_name=author,
        author_email=email or f"{author.lower()}@example.org",
        author_time=author_time,
        author_offset=offset,
        committer_name=author,
        committer_email=email or f"{author.lower()}@example.org",
        committer_time=author_time,
        n_insertions=insertions,
        n_deletions=deletions,
        n_changes_per_suffix=dict(suffixes or {}),
    )


@pytest.fixture
def db(tmp_path):
    """Empty commit store in a temporary directory."""
    with CommitDB(tmp_path / "cohorts.db") as store:
        yield store


@pytest.fixture
def tenure_commits():
    """A (2019 debut, 400 days), B (2020, 10 days, Brief), C (2020, 400 days).

    All three are active in January 2020.
    """
    a_first = ts(2019, 6, 1)
    c_first = ts(2020, 1, 10)
    return [
        make_commit("A", a_first),
        make_commit("A", ts(2020, 1, 15)),
        make_commit("A", days_after(a_first, 400)),
        make_commit("B", ts(2020, 1, 5)),
        make_commit("B", ts(2020, 1, 15)),
        make_commit("C", c_first),
        make_commit("C", days_after(c_first, 400)),
    ]


@pytest.fixture
def tenure_db(db, tenure_commits):
    db.insert_raw_commits(tenure_commits)
    return db
