"""Read commits from a git repository via ``git log``."""

from __future__ import annotations

import re
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, Optional

from ..exceptions import ErrorCode, IngestError
from ..logging_config import get_logger
from .models import RawCommit

logger = get_logger(__name__)

SEPARATOR = "__sep__"

# hash, author date, author name, author e-mail, committer date, name, e-mail.
# Dates are strict ISO 8601 with the UTC offset the commit was made in.
_PRETTY_FORMAT = SEPARATOR.join(["%H", "%aI", "%aN", "%aE", "%cI", "%cN", "%cE"])


def has_promisor(repo_path: Path) -> bool:
    """True if the origin remote is a partial-clone promisor.

    ``--stat`` would make git fetch every missing blob from such a remote,
    so callers skip change statistics for these repositories.
    """
    try:
        result = subprocess.run(
            ["git", "-C", str(repo_path), "config", "remote.origin.promisor"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return False
    return result.stdout.strip() == "true"


class GitCommitReader:
    """Iterate over the commits of one repository, oldest first.

    Usage::

        for commit in GitCommitReader(path, "glib", since=last_seen):
            db.insert_raw_commit(commit)
    """

    _COMMIT_RE = re.compile(r"^[0-9a-f]+" + SEPARATOR)
    _INSERTIONS_RE = re.compile(r"([0-9]+) insertions?")
    _DELETIONS_RE = re.compile(r"([0-9]+) deletions?")
    _FILE_CHANGES_RE = re.compile(r"^ +([^ ]+) +[|] +([0-9]+)")
    _SUFFIX_RE = re.compile(r".*[./](.+)$")

    def __init__(
        self,
        repo_path: str | Path,
        repo_name: Optional[str] = None,
        since: Optional[datetime] = None,
        use_stat: bool = True,
    ):
        self.repo_path = Path(repo_path).resolve()
        self.repo_name = repo_name or self.repo_path.name
        self.since = since
        self.use_stat = use_stat

    def _command(self) -> list[str]:
        cmd = [
            "git",
            "-C",
            str(self.repo_path),
            "log",
            "--branches",
            "--remotes",
            f"--pretty=format:{_PRETTY_FORMAT}",
            "--reverse",
            "--date-order",
        ]
        if self.since is not None:
            since = self.since
            if since.tzinfo is None:
                since = since.replace(tzinfo=timezone.utc)
            cmd += ["--since", since.isoformat()]
        if self.use_stat:
            # Wide enough that paths are never abbreviated with "..."
            cmd.append("--stat=10000,9000")
        cmd.append("HEAD")
        return cmd

    def __iter__(self) -> Iterator[RawCommit]:
        if not self.repo_path.is_dir():
            raise IngestError(
                message=f"Repository not found: {self.repo_path}",
                code=ErrorCode.GC101,
                context={"repo": str(self.repo_path)},
                recoverable=False,
            )

        cmd = self._command()
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except FileNotFoundError as e:
            raise IngestError(
                message="git executable not found",
                code=ErrorCode.GC100,
                context={"repo": str(self.repo_path)},
                recoverable=False,
                recovery_hint="Install git and make sure it is on PATH",
            ) from e

        try:
            if proc.stdout is None:
                return
            yield from self.parse_lines(proc.stdout)
            proc.wait()
            if proc.returncode != 0:
                stderr = proc.stderr.read() if proc.stderr else ""
                raise IngestError(
                    message=f"git log failed for {self.repo_name}: {stderr.strip()}",
                    code=ErrorCode.GC102,
                    context={"repo": str(self.repo_path), "returncode": proc.returncode},
                )
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            if proc.stdout:
                proc.stdout.close()
            if proc.stderr:
                proc.stderr.close()

    def parse_lines(self, lines: Iterable[str]) -> Iterator[RawCommit]:
        """Parse ``git log`` output produced with this reader's format.

        A commit consists of one header line followed by optional ``--stat``
        lines; the next header line starts a new commit.
        """
        current: Optional[RawCommit] = None

        for line in lines:
            line = line.rstrip("\n")

            if self._COMMIT_RE.match(line):
                if current is not None:
                    yield current
                current = self._parse_header(line)
                continue

            if current is None:
                continue

            # Insertions and deletions can match on the same line, either can be absent
            m = self._INSERTIONS_RE.search(line)
            if m and "changed" in line:
                current.n_insertions += int(m.group(1))
            m = self._DELETIONS_RE.search(line)
            if m and "changed" in line:
                current.n_deletions += int(m.group(1))

            m = self._FILE_CHANGES_RE.match(line)
            if m:
                self._add_path_changes(current, m.group(1), int(m.group(2)))

        if current is not None:
            yield current

    def _parse_header(self, line: str) -> RawCommit:
        parts = line.split(SEPARATOR)
        parts += [""] * (7 - len(parts))
        author_time, author_offset = _parse_date(parts[1])
        committer_time, _ = _parse_date(parts[4])
        return RawCommit(
            id=parts[0],
            repo_name=self.repo_name,
            author_time=author_time,
            author_offset=author_offset,
            author_name=parts[2],
            author_email=parts[3].lower(),
            committer_time=committer_time,
            committer_name=parts[5],
            committer_email=parts[6].lower(),
        )

    def _add_path_changes(self, commit: RawCommit, path: str, n_changes: int) -> None:
        m = self._SUFFIX_RE.match(path)
        suffix = m.group(1) if m else path
        commit.n_changes_per_suffix[suffix] = commit.n_changes_per_suffix.get(suffix, 0) + n_changes


def _parse_date(raw: str) -> tuple[Optional[int], int]:
    """Unix seconds and UTC offset (seconds) of an ISO 8601 date; ``(None, 0)`` if invalid."""
    try:
        dt = datetime.fromisoformat(raw.strip())
    except ValueError:
        logger.debug("Unparseable date %r", raw)
        return None, 0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp()), int(dt.utcoffset().total_seconds())
