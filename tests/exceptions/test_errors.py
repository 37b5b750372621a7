"""Tests for the git-cohorts error hierarchy."""

from git_cohorts.exceptions import (
    AggregationError,
    AggregationStage,
    DuplicateValueError,
    EmptyHistogramError,
    ErrorCode,
    GitCohortsError,
    InvalidConfigError,
)
from git_cohorts.histogram import TimeBin


class TestGitCohortsError:
    """Test message rendering."""

    def test_message_only(self):
        assert str(GitCohortsError("No store")) == "No store"

    def test_reason_follows_message(self):
        err = InvalidConfigError("top_n", 0, "must be at least 1")
        assert err.reason == "must be at least 1"
        assert str(err) == "Invalid configuration for top_n: must be at least 1 (key=top_n, value=0)"

    def test_details_are_strings(self):
        err = DuplicateValueError(TimeBin(2020, 0), 3, 1, 2)
        assert err.details == {"existing": "1", "new": "2"}
        assert str(err).endswith("(existing=1, new=2)")

    def test_reason_only(self):
        err = EmptyHistogramError()
        assert str(err) == "Cannot export empty histogram: histogram has no bins"


class TestAggregationError:
    def test_code_follows_stage(self):
        err = AggregationError(AggregationStage.TOP_N_SELECTION, "disk I/O error")
        assert err.code.value.startswith("GC3")
        assert str(err).startswith(f"[{err.code.value}]")
        assert isinstance(err.code, ErrorCode)
