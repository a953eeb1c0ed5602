"""
app/schemas/health.py

Liveness response.
"""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    scheduler_running: bool
