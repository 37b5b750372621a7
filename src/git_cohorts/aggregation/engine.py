"""Cohort histogram computation.

One call to :meth:`CohortEngine.compute` is one aggregation run:

1. summarise every author (first/last commit, active span) into a
   temporary relation,
2. for categorical cohorts, rank categories and keep the top N,
3. accumulate per-bin values into a :class:`CohortHistogram`.

Authors whose active span is at or below the Brief threshold are always
counted in the ``NO_COHORT`` bucket, whatever the cohort type.
"""

from __future__ import annotations

import sqlite3
from collections import defaultdict
from typing import Any, Sequence

from ..config import CohortConfig
from ..exceptions import AggregationError, AggregationStage
from ..histogram import NO_COHORT, OTHER_COHORT, CohortHistogram, TimeBin
from ..logging_config import get_logger
from ..models import CohortType, UnitType
from .fractional import fractional_totals
from .ranking import CategoryRanking
from .request import AggregationRequest, Predicate, QueryBuilder, Source
from .summaries import author_summaries, load_author_summaries

logger = get_logger(__name__)

BRIEF_NAME = "Brief"
OTHER_NAME = "Other"

# cohort type -> (category column key, source relation)
_CATEGORIES = {
    CohortType.DOMAIN: ("domain", Source.COMMITS),
    CohortType.REPO: ("repo", Source.COMMITS),
    CohortType.SUFFIX: ("suffix", Source.SUFFIXES),
}


class CohortEngine:
    """Compute cohort histograms from the commit store.

    Parameters
    ----------
    conn:
        Open connection to a database created by :class:`CommitDB`.
    config:
        Cohort type, unit, interval, Brief threshold and top-N.

    The engine keeps no state between runs; calling :meth:`compute` twice
    recomputes everything from the current commits.
    """

    def __init__(self, conn: sqlite3.Connection, config: CohortConfig):
        self.conn = conn
        self.config = config

    # ── entry point ───────────────────────────────────────────────────

    def compute(self) -> CohortHistogram:
        cfg = self.config
        logger.info(
            "Computing %s histogram of %s per %s (brief <= %d days, top %d)",
            cfg.cohort_type.value,
            cfg.unit.value,
            cfg.interval.value,
            cfg.brief_threshold_days,
            cfg.top_n,
        )

        with author_summaries(self.conn) as relation:
            builder = QueryBuilder(relation)
            if not cfg.cohort_type.is_categorical:
                hist = self._tenure_histogram(builder)
            elif cfg.unit is UnitType.AUTHORS:
                hist = self._fractional_histogram(builder)
            else:
                hist = self._categorical_histogram(builder)

        if hist.bounds() is None:
            logger.warning("No commits to aggregate; histogram is empty")
        return hist

    # ── helpers ───────────────────────────────────────────────────────

    @property
    def _bin_columns(self) -> tuple[str, ...]:
        return ("year", "month") if self.config.monthly else ("year",)

    def _bin_of(self, row: sqlite3.Row) -> TimeBin:
        if self.config.monthly:
            return TimeBin(row["year"], row["month"])
        return TimeBin(row["year"])

    def _above(self) -> Predicate:
        return Predicate.above_threshold(self.config.brief_threshold_seconds)

    def _run(self, stage: AggregationStage, query: tuple[str, list[Any]]) -> list[sqlite3.Row]:
        sql, params = query
        logger.debug("%s: %s %s", stage.value, sql, params)
        try:
            cursor = self.conn.cursor()
            cursor.row_factory = sqlite3.Row
            return cursor.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise AggregationError(stage, str(e), query=sql) from e

    def _base_filters(self) -> tuple[Predicate, ...]:
        # Hidden domains are excluded from domain histograms only
        if self.config.cohort_type is CohortType.DOMAIN:
            return (Predicate("show_domain", "=", 1),)
        return ()

    def _add_brief(
        self, builder: QueryBuilder, hist: CohortHistogram, source: Source, unit: UnitType
    ) -> None:
        """Count Brief authors' activity into ``NO_COHORT`` for every bin."""
        request = AggregationRequest(
            source=source,
            group_by=self._bin_columns,
            unit=unit,
            filters=(Predicate.brief(self.config.brief_threshold_seconds),)
            + self._base_filters(),
        )
        for row in self._run(AggregationStage.BIN_ACCUMULATION, builder.build_select(request)):
            hist.set(self._bin_of(row), NO_COHORT, row["value"])
        hist.set_name(NO_COHORT, BRIEF_NAME)

    # ── tenure ────────────────────────────────────────────────────────

    def _tenure_histogram(self, builder: QueryBuilder) -> CohortHistogram:
        """Cohort = calendar year of the author's first commit."""
        hist = CohortHistogram()
        request = AggregationRequest(
            source=Source.COMMITS,
            group_by=self._bin_columns + ("first_year",),
            unit=self.config.unit,
            filters=(self._above(),),
        )
        for row in self._run(AggregationStage.BIN_ACCUMULATION, builder.build_select(request)):
            first_year = row["first_year"]
            hist.set(self._bin_of(row), first_year, row["value"])
            hist.set_name(first_year, str(first_year))

        self._add_brief(builder, hist, Source.COMMITS, self.config.unit)
        return hist

    # ── categorical: events / size ────────────────────────────────────

    def _rank_by_store(self, builder: QueryBuilder) -> CategoryRanking:
        category, source = _CATEGORIES[self.config.cohort_type]
        request = AggregationRequest(
            source=source,
            group_by=(category,),
            unit=self.config.unit,
            filters=(self._above(),) + self._base_filters(),
            top_n=self.config.top_n,
            overflow=OTHER_COHORT,
        )
        rows = self._run(AggregationStage.TOP_N_SELECTION, builder.build_ranking(request))
        return CategoryRanking.from_ranked(
            [row["category"] for row in rows], request.top_n, request.overflow
        )

    def _categorical_histogram(self, builder: QueryBuilder) -> CohortHistogram:
        """Per-bin sums of events or size, top-N categories plus Other."""
        category, source = _CATEGORIES[self.config.cohort_type]
        ranking = self._rank_by_store(builder)

        request = AggregationRequest(
            source=source,
            group_by=self._bin_columns + (category,),
            unit=self.config.unit,
            filters=(self._above(),) + self._base_filters(),
        )
        cells: dict[TimeBin, dict[int, float]] = defaultdict(lambda: defaultdict(float))
        for row in self._run(AggregationStage.BIN_ACCUMULATION, builder.build_select(request)):
            cells[self._bin_of(row)][ranking.cohort_of(row[category])] += row["value"]

        hist = self._fill_categorical(cells, ranking)
        self._add_brief(builder, hist, source, self.config.unit)
        return hist

    # ── categorical: authors (fractional) ─────────────────────────────

    def attribution_rows(self, builder: QueryBuilder) -> list[tuple[TimeBin, str, str, int]]:
        """``(bin, author, category, events)`` for every above-threshold author."""
        category, source = _CATEGORIES[self.config.cohort_type]
        request = AggregationRequest(
            source=source,
            group_by=self._bin_columns + ("author", category),
            unit=UnitType.EVENTS,
            filters=(self._above(),) + self._base_filters(),
        )
        rows = self._run(AggregationStage.BIN_ACCUMULATION, builder.build_select(request))
        return [(self._bin_of(r), r["author"], r[category], r["value"]) for r in rows]

    def _fractional_histogram(self, builder: QueryBuilder) -> CohortHistogram:
        """Effective author counts: each author's bin activity split across categories."""
        _, source = _CATEGORIES[self.config.cohort_type]
        totals = fractional_totals(self.attribution_rows(builder))
        ranking = CategoryRanking.from_weights(
            totals.category_weights(), self.config.top_n, OTHER_COHORT
        )

        cells: dict[TimeBin, dict[int, float]] = defaultdict(lambda: defaultdict(float))
        for time_bin, category, total in totals.items():
            cells[time_bin][ranking.cohort_of(category)] += total

        hist = self._fill_categorical(cells, ranking)
        self._add_brief(builder, hist, source, UnitType.AUTHORS)
        return hist

    # ── shared ────────────────────────────────────────────────────────

    def _fill_categorical(
        self, cells: dict[TimeBin, dict[int, float]], ranking: CategoryRanking
    ) -> CohortHistogram:
        """Write accumulated cells, truncating to integers.

        Every bin with categorical data gets an Other cell, zero when
        nothing overflowed, so the Other column is always present.
        """
        hist = CohortHistogram()
        for time_bin in sorted(cells):
            by_cohort = cells[time_bin]
            by_cohort.setdefault(OTHER_COHORT, 0.0)
            for cohort, value in sorted(by_cohort.items()):
                hist.set(time_bin, cohort, int(value))

        for cohort, name in ranking.named_cohorts().items():
            hist.set_name(cohort, name)
        hist.set_name(OTHER_COHORT, OTHER_NAME)

        logger.debug(
            "Kept %d categories by name: %s", len(ranking.ranked), ", ".join(ranking.ranked)
        )
        return hist


def compute_histogram(conn: sqlite3.Connection, config: CohortConfig) -> CohortHistogram:
    """Run one aggregation and return the populated histogram."""
    return CohortEngine(conn, config).compute()


def brief_authors(conn: sqlite3.Connection, threshold_days: int) -> Sequence[str]:
    """Names of authors classified as Brief under ``threshold_days``."""
    return [s.author_name for s in load_author_summaries(conn) if s.is_brief(threshold_days)]
