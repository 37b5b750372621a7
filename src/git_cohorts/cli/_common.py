"""Shared CLI helpers."""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..config import CohortConfig, load_config
from ..exceptions import CohortError, GitCohortsError
from ..logging_config import get_logger
from ..meta import ProjectMeta
from ..models import CohortType, IntervalType, UnitType

console = Console()
err_console = Console(stderr=True)

logger = get_logger(__name__)


# ── options shared by plot and export ─────────────────────────────────

COHORT_OPTION = typer.Option(
    None, "--cohort", "-t", help="Cohort type: tenure | domain | repo | suffix"
)
UNIT_OPTION = typer.Option(None, "--unit", "-u", help="Unit: authors | events | size")
INTERVAL_OPTION = typer.Option(None, "--interval", "-i", help="Bin size: month | year")
TOP_N_OPTION = typer.Option(
    None, "--top-n", "-n", min=1, help="Categories kept by name (default: 15)"
)
BRIEF_DAYS_OPTION = typer.Option(
    None,
    "--brief-days",
    min=0,
    help="Authors active for at most this many days are counted as Brief (default: 90)",
)
CONFIG_OPTION = typer.Option(
    None,
    "-c",
    "--config",
    help="Configuration file (TOML)",
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
)
META_OPTION = typer.Option(
    None,
    "--meta",
    "-m",
    help="Project metadata (JSON): year range, domain rules, markers",
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
)


def resolve_config(
    config: Optional[Path] = None,
    cohort: Optional[CohortType] = None,
    unit: Optional[UnitType] = None,
    interval: Optional[IntervalType] = None,
    top_n: Optional[int] = None,
    brief_days: Optional[int] = None,
) -> CohortConfig:
    """Build a config from CLI options; unset options fall back to files and env."""
    return load_config(
        config_file=config,
        cohort_type=cohort,
        unit=unit,
        interval=interval,
        top_n=top_n,
        brief_threshold_days=brief_days,
    )


def load_meta(path: Optional[Path]) -> ProjectMeta:
    return ProjectMeta.from_file(path) if path is not None else ProjectMeta()


@contextmanager
def handle_errors() -> Iterator[None]:
    """Print library errors and exit with status 1."""
    try:
        yield
    except (GitCohortsError, CohortError) as e:
        logger.debug("%s: %s", e.__class__.__name__, e)
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        if isinstance(e, CohortError) and e.recovery_hint:
            err_console.print(f"[dim]{escape(e.recovery_hint)}[/dim]")
        raise typer.Exit(1)
