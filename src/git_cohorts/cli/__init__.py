"""CLI entry point -- registers all subcommands."""

from pathlib import Path
from typing import Optional

import typer

from .. import __version__
from ..logging_config import setup_logging
from ._common import console, err_console

app = typer.Typer(
    name="git-cohorts",
    help="git-cohorts - Contributor cohort histograms from git history",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.callback(invoke_without_command=True, no_args_is_help=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also append debug logs to this file", dir_okay=False
    ),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
):
    """
    Build stacked cohort histograms of contributor activity.

    [bold cyan]Examples:[/bold cyan]

      git-cohorts ingest gnome.db ~/src/glib ~/src/gtk

      git-cohorts export gnome.db --cohort domain --unit events

      git-cohorts plot gnome.db tenure.png --interval month --meta gnome.json
    """
    if version:
        console.print(f"[bold cyan]git-cohorts[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file, console=err_console)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# Import subcommands to register them
from .ingest import ingest as _ingest  # noqa: F401, E402
from .histogram import export as _export, plot as _plot  # noqa: F401, E402
from .authors import authors as _authors  # noqa: F401, E402
