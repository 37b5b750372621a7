"""Per-author tenure summaries, scoped to a single aggregation run."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator

from ..exceptions import AggregationError, AggregationStage
from ..logging_config import get_logger
from ..models import AuthorSummary

logger = get_logger(__name__)

AUTHORS_RELATION = "run_authors"

_SUMMARY_SELECT = """
    SELECT author_name,
           MIN(author_time) AS first_time,
           MIN(author_year) AS first_year,
           MAX(author_time) AS last_time,
           MAX(author_year) AS last_year,
           MAX(author_time) - MIN(author_time) AS active_time,
           COUNT(id) AS n_events,
           COALESCE(SUM(n_insertions), 0) + COALESCE(SUM(n_deletions), 0) AS n_changes
    FROM raw_commits
    WHERE author_time IS NOT NULL
    GROUP BY author_name
"""


@contextmanager
def author_summaries(
    conn: sqlite3.Connection, relation: str = AUTHORS_RELATION
) -> Iterator[str]:
    """Materialise author summaries as a temporary relation for one run.

    Yields the relation name. The relation is dropped on exit whether the
    run succeeded or not; a leftover relation from an interrupted run is
    replaced.
    """
    try:
        conn.execute(f"DROP TABLE IF EXISTS temp.{relation}")
        conn.execute(f"CREATE TEMP TABLE {relation} AS {_SUMMARY_SELECT}")
        conn.execute(f"CREATE INDEX temp.idx_{relation}_name ON {relation}(author_name)")
        count = conn.execute(f"SELECT COUNT(*) FROM {relation}").fetchone()[0]
    except sqlite3.Error as e:
        raise AggregationError(AggregationStage.AUTHOR_SUMMARY, str(e)) from e

    logger.debug("Summarised %d authors into %s", count, relation)
    try:
        yield relation
    finally:
        conn.execute(f"DROP TABLE IF EXISTS temp.{relation}")


def load_author_summaries(conn: sqlite3.Connection) -> list[AuthorSummary]:
    """Author summaries as objects, earliest debut first."""
    try:
        rows = conn.execute(_SUMMARY_SELECT + " ORDER BY first_time, author_name").fetchall()
    except sqlite3.Error as e:
        raise AggregationError(AggregationStage.AUTHOR_SUMMARY, str(e)) from e

    return [
        AuthorSummary(
            author_name=r[0],
            first_time=r[1],
            first_year=r[2],
            last_time=r[3],
            last_year=r[4],
            active_time=r[5],
            n_events=r[6],
            n_changes=r[7],
        )
        for r in rows
    ]
