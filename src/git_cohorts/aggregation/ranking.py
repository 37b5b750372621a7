"""Top-N category selection with a single overflow bucket."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping


@dataclass(frozen=True)
class CategoryRanking:
    """Maps category values to cohort ids.

    With k kept categories the best-ranked one gets id k, the next k - 1
    and so on down to 1, so stacked plots draw the largest category first.
    Anything not in the top N maps to ``overflow``.
    """

    ranked: tuple[str, ...]
    top_n: int
    overflow: int

    @classmethod
    def from_ranked(cls, categories: Iterable[str], top_n: int, overflow: int) -> CategoryRanking:
        """Build from categories already ordered best first."""
        ranked = tuple(categories)[:top_n]
        return cls(ranked=ranked, top_n=top_n, overflow=overflow)

    @classmethod
    def from_weights(
        cls, weights: Mapping[str, float], top_n: int, overflow: int
    ) -> CategoryRanking:
        """Rank by descending weight; ties broken by category name."""
        ordered = sorted(weights, key=lambda category: (-weights[category], category))
        return cls.from_ranked(ordered, top_n, overflow)

    def cohort_of(self, category: str) -> int:
        try:
            return len(self.ranked) - self.ranked.index(category)
        except ValueError:
            return self.overflow

    def named_cohorts(self) -> dict[int, str]:
        """Cohort id -> category name for the kept categories."""
        return {len(self.ranked) - rank: category for rank, category in enumerate(self.ranked)}
