"""Histogram CLI commands -- export the cohort table or plot it."""

from pathlib import Path
from typing import Optional

import typer

from ..aggregation import compute_histogram
from ..config import CohortConfig
from ..histogram import CohortHistogram
from ..meta import ProjectMeta
from ..models import CohortType, IntervalType, UnitType
from ..persistence import CommitDB
from ..plotter import Plotter
from . import app
from ._common import (
    BRIEF_DAYS_OPTION,
    COHORT_OPTION,
    CONFIG_OPTION,
    INTERVAL_OPTION,
    META_OPTION,
    TOP_N_OPTION,
    UNIT_OPTION,
    console,
    err_console,
    handle_errors,
    load_meta,
    resolve_config,
)

_DB_ARGUMENT = typer.Argument(
    ..., help="Commit database written by 'git-cohorts ingest'", exists=True, dir_okay=False
)


def _histogram(
    db_path: Path, cfg: CohortConfig, project: Optional[ProjectMeta] = None
) -> CohortHistogram:
    with CommitDB(db_path) as db:
        if project is not None:
            # Domain rules may differ from the ones applied at ingest time
            db.postprocess(project)
        hist = compute_histogram(db.conn, cfg)
    if hist.bounds() is None:
        err_console.print("[yellow]No commits to aggregate.[/yellow] Run 'git-cohorts ingest' first.")
        raise typer.Exit(0)
    return hist


@app.command()
def export(
    db_path: Path = _DB_ARGUMENT,
    cohort: Optional[CohortType] = COHORT_OPTION,
    unit: Optional[UnitType] = UNIT_OPTION,
    interval: Optional[IntervalType] = INTERVAL_OPTION,
    top_n: Optional[int] = TOP_N_OPTION,
    brief_days: Optional[int] = BRIEF_DAYS_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    meta: Optional[Path] = META_OPTION,
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the table to a file instead of stdout", dir_okay=False
    ),
):
    """
    Print the cohort histogram as a '|'-separated table.

    [bold cyan]Examples:[/bold cyan]

      git-cohorts export gnome.db

      git-cohorts export gnome.db --cohort suffix --unit size --top-n 10 -o suffix.txt

      git-cohorts export gnome.db --cohort domain --meta gnome.json
    """
    with handle_errors():
        cfg = resolve_config(config, cohort, unit, interval, top_n, brief_days)
        project = load_meta(meta) if meta is not None else None
        table = _histogram(db_path, cfg, project).to_table()

    if output is None:
        typer.echo(table)
    else:
        output.write_text(table + "\n", encoding="utf-8")
        err_console.print(f"[green]Wrote[/green] {output}")


@app.command()
def plot(
    db_path: Path = _DB_ARGUMENT,
    out_path: Path = typer.Argument(..., help="PNG file to write", dir_okay=False),
    cohort: Optional[CohortType] = COHORT_OPTION,
    unit: Optional[UnitType] = UNIT_OPTION,
    interval: Optional[IntervalType] = INTERVAL_OPTION,
    top_n: Optional[int] = TOP_N_OPTION,
    brief_days: Optional[int] = BRIEF_DAYS_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    meta: Optional[Path] = META_OPTION,
    first_year: Optional[int] = typer.Option(None, "--from", help="First plotted year"),
    last_year: Optional[int] = typer.Option(None, "--to", help="Last plotted year"),
):
    """
    Render the cohort histogram to a PNG with gnuplot.

    [bold cyan]Examples:[/bold cyan]

      git-cohorts plot gnome.db tenure.png

      git-cohorts plot gnome.db domains.png --cohort domain --interval month --meta gnome.json
    """
    with handle_errors():
        cfg = resolve_config(config, cohort, unit, interval, top_n, brief_days)
        project = load_meta(meta)
        hist = _histogram(db_path, cfg, project if meta is not None else None)
        Plotter().plot(project, cfg.unit.label, hist, out_path, cfg.interval, first_year, last_year)

    console.print(f"[green]Wrote[/green] {out_path}")
