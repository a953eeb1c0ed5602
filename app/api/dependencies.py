"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation and task dispatch.
"""

from __future__ import annotations

from fastapi import HTTPException, Query, Request, status

from app.scheduler.jobs import SchedulerTaskExecutor
from app.services.capture_analysis_service import AnalysisTaskExecutor
from learning.domain import normalize_domain


def get_domain(domain: str | None = Query(default=None, description="Shop host, e.g. ikea.pl")) -> str:
    """
    Normalize the ``domain`` query parameter; blank or missing is a 400.
    """

    normalized = normalize_domain(domain)
    if not normalized:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing domain parameter",
        )
    return normalized


def get_analysis_executor(request: Request) -> AnalysisTaskExecutor:
    """
    Executor bound to the scheduler started in the application lifespan.
    """

    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analysis workers are not running.",
        )
    return SchedulerTaskExecutor(scheduler)
