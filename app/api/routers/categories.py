"""
app/api/routers/categories.py

Learned category suggestions per domain.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.dependencies import get_domain
from app.config import LearningSettings, get_learning_settings
from app.schemas.categories import (
    CategoryConfidenceResponse,
    CategoryStatsResponse,
    CategorySuggestionResponse,
)
from db.repositories.category_repository import CategoryRepository
from db.repositories.types import CategorySuggestion
from db.session import get_db

router = APIRouter(prefix="/api/v1", tags=["categories"])


@router.get("/categories", response_model=CategorySuggestionResponse)
def get_categories(
    domain: str = Depends(get_domain),
    db: Session = Depends(get_db),
    settings: LearningSettings = Depends(get_learning_settings),
) -> CategorySuggestionResponse:
    repository = CategoryRepository(db)
    ranked = repository.ranked_for_domain(
        domain,
        min_samples=settings.category_min_samples,
        min_confidence=settings.category_min_confidence,
    )
    totals = repository.domain_totals(domain)

    categories = [_to_response(item) for item in ranked]
    return CategorySuggestionResponse(
        domain=domain,
        top_category=categories[0] if categories else None,
        categories=categories,
        stats=CategoryStatsResponse(
            total_records=totals.total_records,
            total_samples=totals.total_samples,
        ),
    )


def _to_response(item: CategorySuggestion) -> CategoryConfidenceResponse:
    return CategoryConfidenceResponse(
        category=item.category,
        confidence=item.confidence,
        samples=item.samples,
    )
