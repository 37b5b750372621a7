"""Tests for aggregation/request.py - declarative requests rendered as SQL."""

import pytest

from conftest import days_after, make_commit, ts
from git_cohorts.aggregation import (
    AggregationRequest,
    Predicate,
    QueryBuilder,
    Source,
    author_summaries,
)
from git_cohorts.exceptions import ErrorCode, InvalidRequestError
from git_cohorts.models import UnitType


@pytest.fixture
def builder():
    return QueryBuilder("run_authors")


class TestBuildSelect:
    """Test grouped SELECT rendering."""

    def test_metric_per_unit(self, builder):
        assert builder.metric(UnitType.AUTHORS, Source.COMMITS) == "COUNT(DISTINCT c.author_name)"
        assert builder.metric(UnitType.EVENTS, Source.COMMITS) == "COUNT(DISTINCT c.id)"
        assert "s.n_changes" in builder.metric(UnitType.SIZE, Source.SUFFIXES)
        assert "c.n_insertions + c.n_deletions" in builder.metric(UnitType.SIZE, Source.COMMITS)

    def test_values_are_bound_as_parameters(self, builder):
        request = AggregationRequest(
            source=Source.COMMITS,
            group_by=("year", "first_year"),
            unit=UnitType.AUTHORS,
            filters=(Predicate.above_threshold(7776000),),
        )
        sql, params = builder.build_select(request)
        assert "a.active_time > ?" in sql
        assert "7776000" not in sql
        assert params == [7776000]
        assert "GROUP BY c.author_year, a.first_year" in sql
        assert "c.author_time IS NOT NULL" in sql

    def test_suffix_source_joins_suffix_table(self, builder):
        request = AggregationRequest(
            source=Source.SUFFIXES, group_by=("year", "suffix"), unit=UnitType.SIZE
        )
        sql, _ = builder.build_select(request)
        assert "JOIN commit_suffixes AS s" in sql

    def test_unknown_column_rejected(self, builder):
        request = AggregationRequest(
            source=Source.COMMITS, group_by=("year; DROP TABLE raw_commits",), unit=UnitType.EVENTS
        )
        with pytest.raises(InvalidRequestError) as exc_info:
            builder.build_select(request)
        assert exc_info.value.code == ErrorCode.GC303

    def test_suffix_needs_suffix_source(self, builder):
        request = AggregationRequest(
            source=Source.COMMITS, group_by=("suffix",), unit=UnitType.EVENTS
        )
        with pytest.raises(InvalidRequestError):
            builder.build_select(request)

    def test_unknown_operator_rejected(self, builder):
        request = AggregationRequest(
            source=Source.COMMITS,
            group_by=("year",),
            unit=UnitType.EVENTS,
            filters=(Predicate("year", "LIKE", "20%"),),
        )
        with pytest.raises(InvalidRequestError):
            builder.build_select(request)

    def test_empty_group_by_rejected(self, builder):
        with pytest.raises(InvalidRequestError):
            builder.build_select(
                AggregationRequest(source=Source.COMMITS, group_by=(), unit=UnitType.EVENTS)
            )

    def test_invalid_relation_name(self):
        with pytest.raises(InvalidRequestError):
            QueryBuilder("authors; --")


class TestBuildRanking:
    """Test ranking queries against a real store."""

    def test_ranking_needs_single_column(self, builder):
        request = AggregationRequest(
            source=Source.COMMITS, group_by=("year", "domain"), unit=UnitType.EVENTS, top_n=3
        )
        with pytest.raises(InvalidRequestError):
            builder.build_ranking(request)

    def test_limit_is_parameter(self, builder):
        request = AggregationRequest(
            source=Source.COMMITS, group_by=("domain",), unit=UnitType.EVENTS, top_n=3
        )
        sql, params = builder.build_ranking(request)
        assert sql.endswith("LIMIT ?")
        assert params == [3]

    def test_ranking_order_and_ties(self, db):
        start = ts(2020, 1, 1)
        db.insert_raw_commits(
            [
                make_commit("A", start, repo="gtk"),
                make_commit("A", days_after(start, 1), repo="gtk"),
                make_commit("B", start, repo="glib"),
                make_commit("C", start, repo="atk"),
            ]
        )
        request = AggregationRequest(
            source=Source.COMMITS, group_by=("repo",), unit=UnitType.EVENTS, top_n=2
        )
        with author_summaries(db.conn) as relation:
            sql, params = QueryBuilder(relation).build_ranking(request)
            rows = db.conn.execute(sql, params).fetchall()

        # Ties on value are broken by name
        assert [(r["category"], r["value"], r["rank"]) for r in rows] == [
            ("gtk", 2, 1),
            ("atk", 1, 2),
        ]
