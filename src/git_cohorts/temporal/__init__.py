"""Revision history ingestion: git log parsing and progress reporting."""

from .git_reader import GitCommitReader, has_promisor
from .models import RawCommit
from .status import IngestStatus

__all__ = [
    "GitCommitReader",
    "IngestStatus",
    "RawCommit",
    "has_promisor",
]
