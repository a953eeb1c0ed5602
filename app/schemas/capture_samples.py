"""
app/schemas/capture_samples.py

Request/response schemas for capture sample intake.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class CaptureSampleCreateRequest(BaseModel):
    url: str = Field(..., min_length=1)
    domain: str = Field(..., min_length=1)
    raw_payload: dict[str, Any] = Field(default_factory=dict)
    final_payload: dict[str, Any] = Field(default_factory=dict)
    context: dict[str, Any] = Field(default_factory=dict)


class CaptureSampleAcceptedResponse(BaseModel):
    sample_id: UUID
    domain: str
    analysis_enqueued: bool
    created_at: datetime | None = None
