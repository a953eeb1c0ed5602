"""
learning/recommender.py

Read path for the capture client: which selector to try first, per field,
on a given domain.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from learning.domain import normalize_domain


class SelectorSource(Protocol):
    def best_for_domain(
        self,
        domain: str,
        *,
        min_samples: int,
        min_confidence: float,
        discovered_min_samples: int,
        discovered_min_confidence: float,
    ) -> dict[str, str]:
        ...

    def domain_stats(self, domain: str) -> Any:
        ...


class SampleCounter(Protocol):
    def count_for_domain(self, domain: str) -> int:
        ...


@dataclass(frozen=True)
class RecommendationThresholds:
    min_samples: int = 2
    min_confidence: float = 0.5
    discovered_min_samples: int = 1
    discovered_min_confidence: float = 0.4


@dataclass(frozen=True)
class SelectorRecommendation:
    domain: str
    selectors: dict[str, str]
    stats: Any = None
    total_samples: int = 0


class SelectorRecommender:
    """
    Combines the best-selector map with per-domain statistics.

    Results are advisory: concurrent writers may make counts slightly stale,
    which only affects which hint the client tries first.
    """

    def __init__(
        self,
        selectors: SelectorSource,
        samples: SampleCounter | None = None,
        thresholds: RecommendationThresholds | None = None,
    ) -> None:
        self._selectors = selectors
        self._samples = samples
        self._thresholds = thresholds or RecommendationThresholds()

    def best_for_domain(self, domain: str) -> dict[str, str]:
        normalized = normalize_domain(domain)
        if not normalized:
            return {}
        t = self._thresholds
        return self._selectors.best_for_domain(
            normalized,
            min_samples=t.min_samples,
            min_confidence=t.min_confidence,
            discovered_min_samples=t.discovered_min_samples,
            discovered_min_confidence=t.discovered_min_confidence,
        )

    def recommend(self, domain: str) -> SelectorRecommendation | None:
        """Return the recommendation, or ``None`` when ``domain`` is blank."""
        normalized = normalize_domain(domain)
        if not normalized:
            return None

        return SelectorRecommendation(
            domain=normalized,
            selectors=self.best_for_domain(normalized),
            stats=self._selectors.domain_stats(normalized),
            total_samples=self._samples.count_for_domain(normalized) if self._samples else 0,
        )
