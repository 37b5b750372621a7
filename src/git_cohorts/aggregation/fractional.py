"""Fractional attribution of authors to categories.

An author active under several categories in the same bin would be
counted once per category by a plain distinct-author count. Instead each
author contributes::

    share(bin, author, category) = count(bin, author, category) / count(bin, author)

where ``count(bin, author)`` is the sum of the author's category counts in
that bin. Shares of one author in one bin sum to 1, so summing shares per
``(bin, category)`` yields an effective author count whose cross-category
total equals the true number of distinct authors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Iterable

import numpy as np


@dataclass
class FractionalTotals:
    """Real-valued effective author counts per (bin, category)."""

    bins: list[Hashable]
    categories: list[str]
    totals: np.ndarray  # shape (len(bins), len(categories))

    def category_weights(self) -> dict[str, float]:
        """Sum of fractional totals of each category across all bins."""
        sums = self.totals.sum(axis=0)
        return {category: float(sums[i]) for i, category in enumerate(self.categories)}

    def items(self) -> Iterable[tuple[Hashable, str, float]]:
        """Non-zero ``(bin, category, total)`` cells."""
        for b, c in zip(*np.nonzero(self.totals)):
            yield self.bins[b], self.categories[c], float(self.totals[b, c])


def _index(values: Iterable[Hashable]) -> tuple[list[Hashable], np.ndarray]:
    """Dense integer codes for arbitrary hashable values, in first-seen order."""
    positions: dict[Hashable, int] = {}
    codes = [positions.setdefault(v, len(positions)) for v in values]
    return list(positions), np.asarray(codes, dtype=np.int64)


def attribution_shares(
    bin_codes: np.ndarray, author_codes: np.ndarray, counts: np.ndarray
) -> np.ndarray:
    """Share of each (bin, author, category) row in its (bin, author) total.

    Rows are assumed unique per (bin, author, category) with positive counts.
    """
    counts = np.asarray(counts, dtype=np.float64)
    if counts.size == 0:
        return counts

    n_authors = int(author_codes.max()) + 1
    group = bin_codes * n_authors + author_codes
    _, inverse = np.unique(group, return_inverse=True)
    inverse = inverse.reshape(-1)
    author_totals = np.bincount(inverse, weights=counts)
    return counts / author_totals[inverse]


def fractional_totals(
    rows: Iterable[tuple[Hashable, str, str, int]],
) -> FractionalTotals:
    """Sum attribution shares per (bin, category).

    Args:
        rows: ``(bin, author, category, count)`` tuples, one per distinct
            (bin, author, category), as returned by a grouped store query.
    """
    rows = [r for r in rows if r[3] > 0]
    if not rows:
        return FractionalTotals(bins=[], categories=[], totals=np.zeros((0, 0)))

    bins, bin_codes = _index(r[0] for r in rows)
    _, author_codes = _index(r[1] for r in rows)
    categories, category_codes = _index(r[2] for r in rows)
    counts = np.asarray([r[3] for r in rows], dtype=np.float64)

    shares = attribution_shares(bin_codes, author_codes, counts)

    totals = np.zeros((len(bins), len(categories)), dtype=np.float64)
    np.add.at(totals, (bin_codes, category_codes), shares)

    return FractionalTotals(bins=bins, categories=[str(c) for c in categories], totals=totals)
