"""
Logging for git-cohorts.

Records go to the ``git_cohorts`` logger. The terminal handler is a rich
handler on stderr, normally the same console that draws ingest progress,
so log lines never end up inside an exported table on stdout.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "git_cohorts"

_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def log_level(verbose: bool = False, quiet: bool = False) -> int:
    """Terminal level for the global flags; ``--quiet`` wins over ``--verbose``."""
    if quiet:
        return logging.ERROR
    return logging.DEBUG if verbose else logging.WARNING


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[Union[str, Path]] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Attach handlers to the ``git_cohorts`` logger, replacing earlier ones.

    Args:
        verbose: DEBUG on the terminal, with source paths and locals in tracebacks
        quiet: ERROR only on the terminal
        log_file: append every record, DEBUG included, to this file
        console: rich console for terminal records (default: a new stderr console)
    """
    level = log_level(verbose, quiet)
    logger = logging.getLogger(ROOT_LOGGER)

    # Each CLI invocation configures logging again
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    terminal = RichHandler(
        console=console or Console(stderr=True),
        level=level,
        markup=False,
        show_path=verbose,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
    )
    logger.addHandler(terminal)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    logger.setLevel(logging.DEBUG if log_file is not None else level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger below ``git_cohorts``; module ``__name__`` values are used as is."""
    if not name or name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    if not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
