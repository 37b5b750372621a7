"""SQLite-backed commit store created by ``git-cohorts ingest``."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from ..exceptions import ErrorCode, StoreError
from ..histogram.timebin import TimeBin
from ..logging_config import get_logger
from ..meta import ProjectMeta
from ..temporal.models import RawCommit
from .domains import email_to_domain

logger = get_logger(__name__)

# Current schema version (bump when tables change).
_SCHEMA_VERSION = 1

# Commits dated before this year are assumed to carry broken timestamps.
EARLIEST_PLAUSIBLE_YEAR = 1980

_PRAGMAS = (
    ("temp_store", "memory"),
    ("cache_size", "16384"),
    ("synchronous", "normal"),
    ("journal_mode", "WAL"),
    ("wal_autocheckpoint", "10000"),
    ("journal_size_limit", "10000000"),
)


class CommitDB:
    """Manages the commit database.

    Usage::

        with CommitDB("cohorts.db") as db:
            db.insert_raw_commit(commit)
            db.postprocess(meta)
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the active connection. Raises if not connected."""
        if self._conn is None:
            raise RuntimeError("CommitDB is not connected. Use as context manager or call connect().")
        return self._conn

    # ── lifecycle ─────────────────────────────────────────────────

    def connect(self) -> sqlite3.Connection:
        """Open (or create) the database and run migrations."""
        try:
            conn = sqlite3.connect(str(self.db_path))
            for name, value in _PRAGMAS:
                conn.execute(f"PRAGMA {name}={value}")
        except sqlite3.Error as e:
            raise StoreError(
                message=f"Failed to open database {self.db_path}: {e}",
                code=ErrorCode.GC200,
                context={"path": str(self.db_path)},
                recoverable=False,
            ) from e
        conn.row_factory = sqlite3.Row
        self._conn = conn
        self._migrate()
        logger.debug("Commit DB connected at %s", self.db_path)
        return conn

    def close(self) -> None:
        """Close the connection if open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> CommitDB:
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ── migration ─────────────────────────────────────────────────

    def _migrate(self) -> None:
        """Idempotently create all tables."""
        try:
            self.conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER NOT NULL
                );

                CREATE TABLE IF NOT EXISTS raw_commits (
                    id              TEXT PRIMARY KEY ON CONFLICT REPLACE,
                    repo_name       TEXT NOT NULL,
                    author_name     TEXT,
                    author_email    TEXT,
                    author_domain   TEXT,
                    author_time     INTEGER,
                    author_year     INTEGER,
                    author_month    INTEGER,
                    committer_name  TEXT,
                    committer_email TEXT,
                    committer_time  INTEGER,
                    n_insertions    INTEGER NOT NULL DEFAULT 0,
                    n_deletions     INTEGER NOT NULL DEFAULT 0,
                    show_domain     BOOLEAN NOT NULL DEFAULT 1
                );

                CREATE TABLE IF NOT EXISTS commit_suffixes (
                    commit_id TEXT NOT NULL,
                    suffix    TEXT NOT NULL,
                    n_changes INTEGER NOT NULL DEFAULT 0,
                    PRIMARY KEY (commit_id, suffix) ON CONFLICT REPLACE
                );

                CREATE INDEX IF NOT EXISTS idx_raw_commits_repo ON raw_commits(repo_name);
                CREATE INDEX IF NOT EXISTS idx_raw_commits_author ON raw_commits(author_name);
                CREATE INDEX IF NOT EXISTS idx_raw_commits_email ON raw_commits(author_email);
                CREATE INDEX IF NOT EXISTS idx_raw_commits_domain ON raw_commits(author_domain);
                CREATE INDEX IF NOT EXISTS idx_raw_commits_time ON raw_commits(author_time);
                CREATE INDEX IF NOT EXISTS idx_raw_commits_bin ON raw_commits(author_year, author_month);
                CREATE INDEX IF NOT EXISTS idx_commit_suffixes_suffix ON commit_suffixes(suffix);
                """
            )
            row = self.conn.execute("SELECT version FROM schema_version").fetchone()
            if row is None:
                self.conn.execute(
                    "INSERT INTO schema_version (version) VALUES (?)", (_SCHEMA_VERSION,)
                )
            self.conn.commit()
        except sqlite3.Error as e:
            raise StoreError(
                message=f"Failed to create tables: {e}",
                code=ErrorCode.GC201,
                context={"path": str(self.db_path)},
                recoverable=False,
            ) from e

    # ── ingestion ─────────────────────────────────────────────────

    def insert_raw_commit(self, commit: RawCommit, autocommit: bool = True) -> None:
        """Store one commit, replacing any earlier row with the same id."""
        author_year = author_month = None
        if commit.author_time is not None:
            time_bin = TimeBin.from_timestamp(commit.author_time, utc_offset=commit.author_offset)
            author_year, author_month = time_bin.year, time_bin.month

        try:
            self.conn.execute(
                """
                INSERT INTO raw_commits (
                    id, repo_name, author_name, author_email, author_domain,
                    author_time, author_year, author_month,
                    committer_name, committer_email, committer_time,
                    n_insertions, n_deletions, show_domain
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 1)
                """,
                (
                    commit.id,
                    commit.repo_name,
                    commit.author_name,
                    commit.author_email,
                    email_to_domain(commit.author_email),
                    commit.author_time,
                    author_year,
                    author_month,
                    commit.committer_name,
                    commit.committer_email,
                    commit.committer_time,
                    commit.n_insertions,
                    commit.n_deletions,
                ),
            )
            self.conn.execute("DELETE FROM commit_suffixes WHERE commit_id = ?", (commit.id,))
            self.conn.executemany(
                "INSERT INTO commit_suffixes (commit_id, suffix, n_changes) VALUES (?, ?, ?)",
                [(commit.id, s, n) for s, n in commit.n_changes_per_suffix.items()],
            )
            if autocommit:
                self.conn.commit()
        except sqlite3.Error as e:
            raise StoreError(
                message=f"Failed to insert commit {commit.id}: {e}",
                code=ErrorCode.GC202,
                context={"commit": commit.id, "repo": commit.repo_name},
            ) from e

    def insert_raw_commits(self, commits: Iterable[RawCommit]) -> int:
        """Store many commits in one transaction. Returns the number stored."""
        count = 0
        for commit in commits:
            self.insert_raw_commit(commit, autocommit=False)
            count += 1
        self.conn.commit()
        return count

    def last_author_time(self, repo_name: str) -> Optional[datetime]:
        """Author time of the newest stored commit of ``repo_name``."""
        row = self.conn.execute(
            """
            SELECT MAX(author_time) AS last_time FROM raw_commits
            WHERE repo_name = ? AND author_time IS NOT NULL
            """,
            (repo_name,),
        ).fetchone()
        if row is None or row["last_time"] is None:
            return None
        return datetime.fromtimestamp(row["last_time"], tz=timezone.utc)

    # ── postprocessing ────────────────────────────────────────────

    def postprocess(self, meta: Optional[ProjectMeta] = None, now_year: Optional[int] = None) -> None:
        """Drop implausibly dated commits and apply domain rules from ``meta``.

        Idempotent: domains are recomputed from e-mail addresses and all
        domains are made visible before the rules are applied.
        """
        if now_year is None:
            now_year = datetime.now(tz=timezone.utc).year

        try:
            deleted = self.conn.execute(
                "DELETE FROM raw_commits WHERE author_year < ? OR author_year > ?",
                (EARLIEST_PLAUSIBLE_YEAR, now_year),
            ).rowcount
            if deleted:
                logger.info("Dropped %d commits with implausible timestamps", deleted)
            self.conn.execute(
                "DELETE FROM commit_suffixes WHERE commit_id NOT IN (SELECT id FROM raw_commits)"
            )

            self.conn.create_function("email_to_domain", 1, email_to_domain, deterministic=True)
            self.conn.execute(
                "UPDATE raw_commits SET author_domain = email_to_domain(COALESCE(author_email, '')), "
                "show_domain = 1"
            )

            for domain in meta.domains if meta else []:
                selector, params = domain.emails_selector()
                if selector:
                    self.conn.execute(
                        f"UPDATE raw_commits SET author_domain = ? WHERE {selector}",
                        [domain.name, *params],
                    )
                if domain.show is not None:
                    self.conn.execute(
                        "UPDATE raw_commits SET show_domain = ? WHERE author_domain = ?",
                        (int(domain.show), domain.name),
                    )

            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise StoreError(
                message=f"Failed to postprocess commits: {e}",
                code=ErrorCode.GC203,
                context={"path": str(self.db_path)},
            ) from e

    # ── inspection ────────────────────────────────────────────────

    def commit_count(self) -> int:
        row = self.conn.execute("SELECT COUNT(*) AS cnt FROM raw_commits").fetchone()
        return row["cnt"] if row else 0

    def repo_names(self) -> list[str]:
        rows = self.conn.execute(
            "SELECT DISTINCT repo_name FROM raw_commits ORDER BY repo_name"
        ).fetchall()
        return [r["repo_name"] for r in rows]
