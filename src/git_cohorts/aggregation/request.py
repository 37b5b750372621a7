"""Declarative aggregation requests and the query builder that runs them.

Every histogram strategy describes what it needs as an
:class:`AggregationRequest` (grouping columns, filters, metric, top-N) and
:class:`QueryBuilder` turns it into parameterised SQL against the commit
store joined with the run's author summary relation. Column names and
operators come from fixed whitelists; only values are bound as parameters.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..exceptions import InvalidRequestError
from ..models import UnitType


class Source(str, Enum):
    """Relation an aggregation reads from."""

    COMMITS = "commits"  # one row per commit
    SUFFIXES = "suffixes"  # one row per (commit, file suffix)


# group-by / filter key -> (SQL expression, sources it is available in)
COLUMNS: dict[str, tuple[str, frozenset[Source]]] = {
    "year": ("c.author_year", frozenset(Source)),
    "month": ("c.author_month", frozenset(Source)),
    "author": ("c.author_name", frozenset(Source)),
    "author_time": ("c.author_time", frozenset(Source)),
    "domain": ("c.author_domain", frozenset(Source)),
    "show_domain": ("c.show_domain", frozenset(Source)),
    "repo": ("c.repo_name", frozenset(Source)),
    "first_year": ("a.first_year", frozenset(Source)),
    "active_time": ("a.active_time", frozenset(Source)),
    "suffix": ("s.suffix", frozenset({Source.SUFFIXES})),
}

_OPERATORS = frozenset({"=", "!=", "<", "<=", ">", ">="})
_NULL_OPERATORS = frozenset({"IS NULL", "IS NOT NULL"})

_SIZE_EXPR = {
    Source.COMMITS: "c.n_insertions + c.n_deletions",
    Source.SUFFIXES: "s.n_changes",
}


@dataclass(frozen=True)
class Predicate:
    """``column op value`` filter; ``value`` is ignored for NULL tests."""

    column: str
    op: str
    value: Any = None

    @classmethod
    def above_threshold(cls, threshold_seconds: int) -> Predicate:
        return cls("active_time", ">", threshold_seconds)

    @classmethod
    def brief(cls, threshold_seconds: int) -> Predicate:
        return cls("active_time", "<=", threshold_seconds)


@dataclass(frozen=True)
class AggregationRequest:
    """What to aggregate, independent of SQL.

    Attributes:
        source: relation to read
        group_by: column keys to group on, in output order
        unit: metric computed per group
        filters: predicates combined with AND
        top_n: keep only the N highest groups (ranking queries)
        overflow: cohort id for groups ranked below ``top_n``
    """

    source: Source
    group_by: tuple[str, ...]
    unit: UnitType
    filters: tuple[Predicate, ...] = ()
    top_n: Optional[int] = None
    overflow: Optional[int] = None


class QueryBuilder:
    """Render :class:`AggregationRequest` objects as SQL.

    Parameters
    ----------
    authors_relation:
        Name of the per-run author summary relation joined as ``a``.
    """

    def __init__(self, authors_relation: str):
        if not authors_relation.isidentifier():
            raise InvalidRequestError(
                f"Invalid relation name: {authors_relation!r}", relation=authors_relation
            )
        self.authors_relation = authors_relation

    # ── clauses ───────────────────────────────────────────────────────

    def _from(self, source: Source) -> str:
        sql = (
            f"raw_commits AS c "
            f"JOIN {self.authors_relation} AS a ON a.author_name = c.author_name"
        )
        if source is Source.SUFFIXES:
            sql += " JOIN commit_suffixes AS s ON s.commit_id = c.id"
        return sql

    def _column(self, key: str, source: Source) -> str:
        try:
            expr, sources = COLUMNS[key]
        except KeyError:
            raise InvalidRequestError(f"Unknown column: {key!r}", column=key)
        if source not in sources:
            raise InvalidRequestError(
                f"Column {key!r} is not available from {source.value}",
                column=key,
                source=source.value,
            )
        return expr

    def metric(self, unit: UnitType, source: Source) -> str:
        if unit is UnitType.AUTHORS:
            return "COUNT(DISTINCT c.author_name)"
        if unit is UnitType.EVENTS:
            return "COUNT(DISTINCT c.id)"
        return f"COALESCE(SUM({_SIZE_EXPR[source]}), 0)"

    def _where(self, request: AggregationRequest) -> tuple[str, list[Any]]:
        # Commits without a parseable author time are never cohorted
        clauses = ["c.author_time IS NOT NULL"]
        params: list[Any] = []
        for predicate in request.filters:
            column = self._column(predicate.column, request.source)
            op = predicate.op.upper()
            if op in _NULL_OPERATORS:
                clauses.append(f"{column} {op}")
            elif op in _OPERATORS:
                clauses.append(f"{column} {op} ?")
                params.append(predicate.value)
            else:
                raise InvalidRequestError(f"Unsupported operator: {predicate.op!r}", op=predicate.op)
        return " AND ".join(clauses), params

    # ── queries ───────────────────────────────────────────────────────

    def build_select(self, request: AggregationRequest) -> tuple[str, list[Any]]:
        """Grouped query returning one row per group: group columns, ``value``."""
        if not request.group_by:
            raise InvalidRequestError("Aggregation needs at least one group-by column")

        columns = [self._column(key, request.source) for key in request.group_by]
        select = ", ".join(f"{expr} AS {key}" for expr, key in zip(columns, request.group_by))
        where, params = self._where(request)
        group = ", ".join(columns)

        sql = (
            f"SELECT {select}, {self.metric(request.unit, request.source)} AS value "
            f"FROM {self._from(request.source)} "
            f"WHERE {where} "
            f"GROUP BY {group} "
            f"ORDER BY {group}"
        )
        return sql, params

    def build_ranking(self, request: AggregationRequest) -> tuple[str, list[Any]]:
        """Rank the single group-by column by the metric, highest first.

        Returns rows of ``category, value, rank``; ties are broken by
        category so rankings are deterministic.
        """
        if len(request.group_by) != 1:
            raise InvalidRequestError(
                "Ranking needs exactly one group-by column", group_by=list(request.group_by)
            )

        column = self._column(request.group_by[0], request.source)
        where, params = self._where(request)
        sql = (
            "SELECT category, value, "
            "ROW_NUMBER() OVER (ORDER BY value DESC, category ASC) AS rank "
            f"FROM (SELECT {column} AS category, "
            f"{self.metric(request.unit, request.source)} AS value "
            f"FROM {self._from(request.source)} "
            f"WHERE {where} "
            f"GROUP BY {column}) "
            "ORDER BY rank"
        )
        if request.top_n is not None:
            sql += " LIMIT ?"
            params.append(request.top_n)
        return sql, params
