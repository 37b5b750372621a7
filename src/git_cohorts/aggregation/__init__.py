"""Aggregation engine: author summaries, category ranking, cohort strategies."""

from .engine import CohortEngine, brief_authors, compute_histogram
from .fractional import FractionalTotals, attribution_shares, fractional_totals
from .ranking import CategoryRanking
from .request import AggregationRequest, Predicate, QueryBuilder, Source
from .summaries import author_summaries, load_author_summaries

__all__ = [
    "AggregationRequest",
    "CategoryRanking",
    "CohortEngine",
    "FractionalTotals",
    "Predicate",
    "QueryBuilder",
    "Source",
    "attribution_shares",
    "author_summaries",
    "brief_authors",
    "compute_histogram",
    "fractional_totals",
    "load_author_summaries",
]
