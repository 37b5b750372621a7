"""Authors CLI command -- list per-author activity summaries."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..aggregation import load_author_summaries
from ..persistence import CommitDB
from . import app
from ._common import BRIEF_DAYS_OPTION, CONFIG_OPTION, console, handle_errors, resolve_config


def _date(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")


@app.command()
def authors(
    db_path: Path = typer.Argument(
        ..., help="Commit database written by 'git-cohorts ingest'", exists=True, dir_okay=False
    ),
    limit: int = typer.Option(
        50,
        "--limit",
        "-n",
        help="Maximum number of authors to list",
        min=1,
    ),
    brief_days: Optional[int] = BRIEF_DAYS_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
):
    """
    List authors with their first and last commit, earliest first.

    Authors whose active span is within the Brief threshold are marked.

    [bold cyan]Examples:[/bold cyan]

      git-cohorts authors gnome.db --limit 20
    """
    with handle_errors():
        cfg = resolve_config(config, brief_days=brief_days)
        with CommitDB(db_path) as db:
            summaries = load_author_summaries(db.conn)

    if not summaries:
        console.print("[yellow]No authors recorded yet.[/yellow]")
        raise typer.Exit(0)

    table = Table(
        title=f"Authors ({len(summaries)})",
        show_lines=False,
        pad_edge=True,
    )
    table.add_column("Author", style="bold")
    table.add_column("First", style="green")
    table.add_column("Last", style="green")
    table.add_column("Days", justify="right")
    table.add_column("Commits", justify="right", style="cyan")
    table.add_column("Changes", justify="right")
    table.add_column("", style="dim")  # brief marker

    for s in summaries[:limit]:
        table.add_row(
            s.author_name or "(blank)",
            _date(s.first_time),
            _date(s.last_time),
            f"{s.active_days:.0f}",
            str(s.n_events),
            str(s.n_changes),
            "brief" if s.is_brief(cfg.brief_threshold_days) else "",
        )

    console.print(table)
    if len(summaries) > limit:
        console.print(f"[dim]... and {len(summaries) - limit} more[/dim]")
