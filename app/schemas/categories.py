"""
app/schemas/categories.py

Response schemas for the category suggestion endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class CategoryConfidenceResponse(BaseModel):
    category: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    samples: int = Field(..., ge=0)


class CategoryStatsResponse(BaseModel):
    total_records: int = Field(..., ge=0)
    total_samples: int = Field(..., ge=0)


class CategorySuggestionResponse(BaseModel):
    domain: str
    top_category: CategoryConfidenceResponse | None = None
    categories: list[CategoryConfidenceResponse] = Field(default_factory=list)
    stats: CategoryStatsResponse
