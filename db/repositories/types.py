"""
Typed read models returned by the learning repositories.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class SelectorListing:
    """
    One selector row with its derived confidence, for debugging and admin.
    """

    id: str
    field: str
    selector: str
    success: int
    failure: int
    confidence: float
    discovery_method: str
    discovery_score: float | None
    last_seen: datetime | None


@dataclass(frozen=True)
class FieldStats:
    field: str
    selector_count: int
    best_confidence: float | None = None
    best_selector: str | None = None
    best_discovery_method: str | None = None


@dataclass(frozen=True)
class SelectorStats:
    total_selectors: int
    discovered_count: int
    heuristic_count: int
    manual_count: int
    fields: list[FieldStats] = field(default_factory=list)


@dataclass(frozen=True)
class CategorySuggestion:
    category: str
    confidence: float
    samples: int


@dataclass(frozen=True)
class CategoryTotals:
    total_records: int
    total_samples: int
