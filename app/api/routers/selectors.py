"""
app/api/routers/selectors.py

Learned selectors for the capture client.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_domain
from app.config import LearningSettings, get_learning_settings
from app.schemas.selectors import (
    SelectorFieldStatsResponse,
    SelectorRecommendationResponse,
    SelectorStatsResponse,
)
from db.repositories.capture_sample_repository import CaptureSampleRepository
from db.repositories.selector_repository import SelectorRepository
from db.session import get_db
from learning.recommender import SelectorRecommender

router = APIRouter(prefix="/api/v1", tags=["selectors"])


@router.get("/selectors", response_model=SelectorRecommendationResponse)
def get_selectors(
    domain: str = Depends(get_domain),
    db: Session = Depends(get_db),
    settings: LearningSettings = Depends(get_learning_settings),
) -> SelectorRecommendationResponse:
    """
    Best learned selector per field for ``domain`` plus debugging stats.
    ``www.`` and letter case in the query are ignored.
    """
    recommender = SelectorRecommender(
        SelectorRepository(db),
        CaptureSampleRepository(db),
        thresholds=settings.selector_thresholds,
    )
    recommendation = recommender.recommend(domain)
    if recommendation is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing domain parameter",
        )

    stats = recommendation.stats
    return SelectorRecommendationResponse(
        domain=recommendation.domain,
        selectors=recommendation.selectors,
        stats=SelectorStatsResponse(
            total_selectors=stats.total_selectors,
            total_samples=recommendation.total_samples,
            discovered_count=stats.discovered_count,
            heuristic_count=stats.heuristic_count,
            manual_count=stats.manual_count,
            fields=[SelectorFieldStatsResponse(**asdict(item)) for item in stats.fields],
        ),
    )
