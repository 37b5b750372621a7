"""Exception hierarchy for git-cohorts."""

from .base import GitCohortsError
from .config import ConfigurationError, InvalidConfigError, InvalidPathError
from .histogram import DuplicateValueError, EmptyHistogramError, HistogramError
from .taxonomy import (
    AggregationError,
    AggregationStage,
    CohortError,
    ErrorCode,
    IngestError,
    InvalidRequestError,
    RenderError,
    StoreError,
)

__all__ = [
    "GitCohortsError",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidPathError",
    "HistogramError",
    "DuplicateValueError",
    "EmptyHistogramError",
    "CohortError",
    "ErrorCode",
    "AggregationStage",
    "AggregationError",
    "IngestError",
    "InvalidRequestError",
    "RenderError",
    "StoreError",
]
