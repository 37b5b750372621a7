"""Ingest CLI command -- read git history into the commit store."""

from pathlib import Path
from typing import Iterable, Iterator, List, Optional

import typer

from ..logging_config import get_logger
from ..persistence import CommitDB
from ..temporal import GitCommitReader, IngestStatus, RawCommit, has_promisor
from . import app
from ._common import META_OPTION, console, err_console, handle_errors, load_meta

logger = get_logger(__name__)


def _logged(commits: Iterable[RawCommit], status: IngestStatus) -> Iterator[RawCommit]:
    for commit in commits:
        status.log_commit(commit)
        yield commit


@app.command()
def ingest(
    db_path: Path = typer.Argument(..., help="Commit database to create or update", dir_okay=False),
    repos: List[Path] = typer.Argument(
        ...,
        help="Git repositories to read",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    meta: Optional[Path] = META_OPTION,
    full: bool = typer.Option(
        False,
        "--full",
        help="Re-read whole histories instead of continuing after the newest stored commit",
    ),
):
    """
    Read commits from git repositories into DB_PATH.

    Each repository is stored under its directory name. Later runs only read
    commits newer than the last one stored for that repository.

    [bold cyan]Examples:[/bold cyan]

      git-cohorts ingest gnome.db ~/src/glib ~/src/gtk

      git-cohorts ingest gnome.db ~/src/glib --meta gnome.json --full
    """
    with handle_errors():
        project = load_meta(meta)

        with CommitDB(db_path) as db, IngestStatus(console=err_console) as status:
            for repo in repos:
                repo_name = repo.resolve().name
                since = None if full else db.last_author_time(repo_name)
                use_stat = not has_promisor(repo)

                status.begin_repo(repo_name)
                if not use_stat:
                    status.warn("promisor remote, skipping --stat (no size or suffix data)")
                if since is not None:
                    logger.info("%s: continuing after %s", repo_name, since.isoformat())

                reader = GitCommitReader(repo, repo_name, since=since, use_stat=use_stat)
                n_stored = db.insert_raw_commits(_logged(reader, status))
                status.end_repo()
                logger.info("%s: stored %d commits", repo_name, n_stored)

            db.postprocess(project)
            total = db.commit_count()

    console.print(f"[green]Stored[/green] {total} commits from {len(repos)} repositories")
