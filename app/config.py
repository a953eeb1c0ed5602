"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files
from learning.recommender import RecommendationThresholds


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class LearningSettings:
    """
    Thresholds for selector/category recommendation and capture analysis.
    """

    selector_min_samples: int = 2
    selector_min_confidence: float = 0.5
    discovered_min_samples: int = 1
    discovered_min_confidence: float = 0.4
    category_min_samples: int = 2
    category_min_confidence: float = 0.3
    price_match_tolerance: float = 0.02
    analysis_max_workers: int = 4

    @property
    def selector_thresholds(self) -> RecommendationThresholds:
        return RecommendationThresholds(
            min_samples=self.selector_min_samples,
            min_confidence=self.selector_min_confidence,
            discovered_min_samples=self.discovered_min_samples,
            discovered_min_confidence=self.discovered_min_confidence,
        )


@lru_cache(maxsize=1)
def get_learning_settings() -> LearningSettings:
    """
    Return cached learning settings from environment variables.
    """

    return LearningSettings(
        selector_min_samples=max(1, _get_int_env("SELECTOR_MIN_SAMPLES", 2)),
        selector_min_confidence=_clamp_unit(_get_float_env("SELECTOR_MIN_CONFIDENCE", 0.5)),
        discovered_min_samples=max(1, _get_int_env("DISCOVERED_MIN_SAMPLES", 1)),
        discovered_min_confidence=_clamp_unit(_get_float_env("DISCOVERED_MIN_CONFIDENCE", 0.4)),
        category_min_samples=max(1, _get_int_env("CATEGORY_MIN_SAMPLES", 2)),
        category_min_confidence=_clamp_unit(_get_float_env("CATEGORY_MIN_CONFIDENCE", 0.3)),
        price_match_tolerance=max(0.0, _get_float_env("PRICE_MATCH_TOLERANCE", 0.02)),
        analysis_max_workers=max(1, _get_int_env("ANALYSIS_MAX_WORKERS", 4)),
    )
