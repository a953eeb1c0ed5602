"""
app/schemas/selectors.py

Response schemas for the selector recommendation endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SelectorFieldStatsResponse(BaseModel):
    field: str
    selector_count: int = Field(..., ge=0)
    best_confidence: float | None = None
    best_selector: str | None = None
    best_discovery_method: str | None = None


class SelectorStatsResponse(BaseModel):
    total_selectors: int = Field(..., ge=0)
    total_samples: int = Field(..., ge=0)
    discovered_count: int = Field(..., ge=0)
    heuristic_count: int = Field(..., ge=0)
    manual_count: int = Field(..., ge=0)
    fields: list[SelectorFieldStatsResponse] = Field(default_factory=list)


class SelectorRecommendationResponse(BaseModel):
    """
    ``selectors`` maps stored field names (``name``, ``price``,
    ``thumbnail_url``) to the selector the client should try first.
    Fields without a reliable selector are absent.
    """

    domain: str
    selectors: dict[str, str] = Field(default_factory=dict)
    stats: SelectorStatsResponse
