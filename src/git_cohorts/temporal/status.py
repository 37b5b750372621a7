"""Per-repository ingestion progress on the terminal."""

from __future__ import annotations

import time
from typing import Optional

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TaskID, TextColumn, TimeElapsedColumn

from ..histogram.timebin import TimeBin
from .models import RawCommit

# Minimum interval between redraws within the same month
_REFRESH_SECONDS = 0.5


class IngestStatus:
    """Show the repository being ingested, its latest month and commit count.

    Usage::

        with IngestStatus() as status:
            status.begin_repo("glib")
            for commit in reader:
                status.log_commit(commit)
            status.end_repo()
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)
        self._progress: Progress | None = None
        self._task_id: Optional[TaskID] = None
        self.repo_name = ""
        self.n_commits = 0
        self._last_refresh = 0.0
        self._last_month: Optional[tuple[int, int]] = None

    def __enter__(self) -> IngestStatus:
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.description}"),
            TimeElapsedColumn(),
            console=self.console,
            transient=False,
        )
        self._progress.start()
        return self

    def __exit__(self, *args) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None

    def begin_repo(self, repo_name: str) -> None:
        self.repo_name = repo_name
        self.n_commits = 0
        self._last_refresh = 0.0
        self._last_month = None
        if self._progress is not None:
            self._task_id = self._progress.add_task(f"{repo_name}: starting", total=None)

    def log_commit(self, commit: RawCommit) -> None:
        self.n_commits += 1
        if commit.author_time is None:
            return

        time_bin = TimeBin.from_timestamp(commit.author_time, utc_offset=commit.author_offset)
        month = (time_bin.year, time_bin.month + 1)
        now = time.monotonic()
        if now - self._last_refresh > _REFRESH_SECONDS or month != self._last_month:
            self._last_refresh = now
            self._last_month = month
            self._update(self.describe())

    def end_repo(self) -> None:
        if self._progress is not None and self._task_id is not None:
            self._progress.update(self._task_id, description=self.describe(), total=1, completed=1)
        self._task_id = None

    def describe(self) -> str:
        if self._last_month is None:
            return f"{self.repo_name}: {self.n_commits} commits"
        year, month = self._last_month
        return f"{self.repo_name}: {year}-{month:02d} ({self.n_commits} commits)"

    def warn(self, message: str) -> None:
        self.console.print(f"[yellow]{self.repo_name}: {message}[/yellow]")

    def _update(self, description: str) -> None:
        if self._progress is not None and self._task_id is not None:
            self._progress.update(self._task_id, description=description)
