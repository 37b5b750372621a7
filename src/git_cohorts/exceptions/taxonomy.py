"""Error taxonomy with error codes and recovery hints.

Error Code Convention:
    GC1xx - Ingestion errors
    GC2xx - Store errors
    GC3xx - Aggregation errors
    GC4xx - Rendering errors
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Structured error codes for observability and debugging."""

    # Ingestion errors (GC1xx)
    GC100 = "GC100"  # Git not found
    GC101 = "GC101"  # Repository path missing
    GC102 = "GC102"  # git log failed

    # Store errors (GC2xx)
    GC200 = "GC200"  # Database could not be opened
    GC201 = "GC201"  # Schema creation failed
    GC202 = "GC202"  # Insert failed
    GC203 = "GC203"  # Postprocessing failed

    # Aggregation errors (GC3xx)
    GC300 = "GC300"  # Author summary failed
    GC301 = "GC301"  # Top-N selection failed
    GC302 = "GC302"  # Bin accumulation failed
    GC303 = "GC303"  # Malformed aggregation request

    # Rendering errors (GC4xx)
    GC400 = "GC400"  # gnuplot not found
    GC401 = "GC401"  # gnuplot reported an error


class AggregationStage(str, Enum):
    """Dependent steps of one aggregation run."""

    AUTHOR_SUMMARY = "author_summary"
    TOP_N_SELECTION = "top_n_selection"
    BIN_ACCUMULATION = "bin_accumulation"


_STAGE_CODES = {
    AggregationStage.AUTHOR_SUMMARY: ErrorCode.GC300,
    AggregationStage.TOP_N_SELECTION: ErrorCode.GC301,
    AggregationStage.BIN_ACCUMULATION: ErrorCode.GC302,
}


@dataclass
class CohortError(Exception):
    """Base exception with structured context.

    Attributes:
        message: Human-readable error description
        code: Structured error code for categorization
        context: Additional context (paths, stage, query)
        recoverable: Whether the error can be recovered from
        recovery_hint: Suggested fix for the user
    """

    message: str
    code: ErrorCode
    context: dict[str, Any] = field(default_factory=dict)
    recoverable: bool = True
    recovery_hint: str | None = None

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __post_init__(self) -> None:
        super().__init__(str(self))


class IngestError(CohortError):
    """Errors while reading revision history (GC1xx)."""

    pass


class StoreError(CohortError):
    """Errors while opening or writing the event store (GC2xx)."""

    pass


class InvalidRequestError(CohortError):
    """A malformed aggregation request (GC303)."""

    def __init__(self, message: str, **context: Any):
        super().__init__(
            message=message,
            code=ErrorCode.GC303,
            context=context,
            recoverable=False,
        )


class AggregationError(CohortError):
    """A store failure during one stage of an aggregation run (GC30x)."""

    def __init__(self, stage: AggregationStage, reason: str, **context: Any):
        context["stage"] = stage.value
        super().__init__(
            message=f"Aggregation failed during {stage.value}: {reason}",
            code=_STAGE_CODES[stage],
            context=context,
            recoverable=False,
            recovery_hint="Check that the database exists and was created by 'git-cohorts ingest'",
        )
        self.stage = stage


class RenderError(CohortError):
    """Errors while handing the histogram to gnuplot (GC4xx)."""

    pass
