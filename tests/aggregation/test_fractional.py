"""Tests for aggregation/fractional.py - splitting authors across categories."""

import numpy as np
import pytest

from git_cohorts.aggregation import attribution_shares, fractional_totals


class TestAttributionShares:
    def test_single_category_gets_full_share(self):
        shares = attribution_shares(np.array([0]), np.array([0]), np.array([5]))
        assert shares.tolist() == [1.0]

    def test_shares_proportional_to_counts(self):
        shares = attribution_shares(np.array([0, 0]), np.array([0, 0]), np.array([3, 1]))
        assert shares.tolist() == pytest.approx([0.75, 0.25])

    def test_authors_and_bins_are_separate_groups(self):
        bins = np.array([0, 0, 0, 1])
        authors = np.array([0, 0, 1, 0])
        counts = np.array([1, 1, 4, 2])
        shares = attribution_shares(bins, authors, counts)
        assert shares.tolist() == pytest.approx([0.5, 0.5, 1.0, 1.0])

    def test_empty(self):
        shares = attribution_shares(np.array([], dtype=int), np.array([], dtype=int), np.array([]))
        assert shares.size == 0


class TestFractionalTotals:
    """Test per-(bin, category) sums of shares."""

    @pytest.fixture
    def rows(self):
        return [
            ("2020", "alice", "glib", 2),
            ("2020", "alice", "gtk", 1),
            ("2020", "bob", "glib", 4),
            ("2021", "alice", "gtk", 1),
            ("2021", "carol", "gtk", 2),
            ("2021", "carol", "atk", 2),
        ]

    def test_shares_sum_to_one_per_author_and_bin(self, rows):
        """Cross-category totals equal the number of distinct authors."""
        totals = fractional_totals(rows)
        per_bin = dict(zip(totals.bins, totals.totals.sum(axis=1)))
        assert per_bin["2020"] == pytest.approx(2.0)
        assert per_bin["2021"] == pytest.approx(2.0)

    def test_cell_values(self, rows):
        totals = fractional_totals(rows)
        cells = {(b, c): v for b, c, v in totals.items()}
        assert cells[("2020", "glib")] == pytest.approx(2 / 3 + 1)
        assert cells[("2020", "gtk")] == pytest.approx(1 / 3)
        assert cells[("2021", "gtk")] == pytest.approx(1.5)
        assert cells[("2021", "atk")] == pytest.approx(0.5)
        assert ("2021", "glib") not in cells

    def test_category_weights(self, rows):
        weights = fractional_totals(rows).category_weights()
        assert weights["glib"] == pytest.approx(5 / 3)
        assert weights["gtk"] == pytest.approx(1 / 3 + 1.5)
        assert weights["atk"] == pytest.approx(0.5)

    def test_zero_counts_ignored(self):
        totals = fractional_totals([("2020", "alice", "glib", 0), ("2020", "alice", "gtk", 3)])
        assert totals.categories == ["gtk"]

    def test_no_rows(self):
        totals = fractional_totals([])
        assert list(totals.items()) == []
        assert totals.category_weights() == {}
