"""
app/schemas/admin.py

Schemas for administrative selector management and domain analytics.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class SelectorListingResponse(BaseModel):
    id: str
    field: str
    selector: str
    success: int
    failure: int
    confidence: float
    discovery_method: str
    discovery_score: float | None = None
    last_seen: datetime | None = None


class SelectorListResponse(BaseModel):
    domain: str
    selectors: list[SelectorListingResponse] = Field(default_factory=list)


class ManualSelectorRequest(BaseModel):
    domain: str = Field(..., min_length=1)
    field: str = Field(..., min_length=1)
    selector: str = Field(..., min_length=1)
    discovery_score: float | None = None


class SelectorBatchRequest(BaseModel):
    ids: list[UUID] = Field(..., min_length=1)


class SelectorBatchResponse(BaseModel):
    affected: int = Field(..., ge=0)


class DomainSummaryResponse(BaseModel):
    domain: str
    total_samples: int
    selector_count: int
    discovered_count: int
    avg_confidence: float
    field_confidence: dict[str, float | None] = Field(default_factory=dict)
    last_sample_at: datetime | None = None


class LearningOverviewResponse(BaseModel):
    total_domains: int
    total_selectors: int
    discovered_selectors: int
    total_samples: int
    domains: list[DomainSummaryResponse] = Field(default_factory=list)
