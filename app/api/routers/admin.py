"""
app/api/routers/admin.py

Administrative selector management and per-domain learning analytics.
Counter resets and deletions only ever happen through these endpoints.
"""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_domain
from app.schemas.admin import (
    DomainSummaryResponse,
    LearningOverviewResponse,
    ManualSelectorRequest,
    SelectorBatchRequest,
    SelectorBatchResponse,
    SelectorListingResponse,
    SelectorListResponse,
)
from app.services.domain_analytics_service import DomainAnalyticsService
from db.repositories.selector_repository import SelectorRepository
from db.session import get_db
from learning.fields import resolve_field

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get("/domains", response_model=LearningOverviewResponse)
def get_domain_overview(db: Session = Depends(get_db)) -> LearningOverviewResponse:
    overview = DomainAnalyticsService(db).overview()
    return LearningOverviewResponse(
        total_domains=overview.total_domains,
        total_selectors=overview.total_selectors,
        discovered_selectors=overview.discovered_selectors,
        total_samples=overview.total_samples,
        domains=[DomainSummaryResponse(**asdict(summary)) for summary in overview.domains],
    )


@router.get("/selectors", response_model=SelectorListResponse)
def list_selectors(
    domain: str = Depends(get_domain),
    db: Session = Depends(get_db),
) -> SelectorListResponse:
    listings = SelectorRepository(db).all_for_domain(domain)
    return SelectorListResponse(
        domain=domain,
        selectors=[SelectorListingResponse(**asdict(item)) for item in listings],
    )


@router.post(
    "/selectors",
    status_code=status.HTTP_201_CREATED,
    response_model=SelectorListingResponse,
)
def create_manual_selector(
    body: ManualSelectorRequest,
    db: Session = Depends(get_db),
) -> SelectorListingResponse:
    if resolve_field(body.field) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported field: {body.field}",
        )

    repository = SelectorRepository(db)
    with db.begin():
        row = repository.upsert_manual(
            domain=body.domain,
            field=body.field,
            selector=body.selector,
            discovery_score=body.discovery_score,
        )
        if row is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Domain and selector must not be blank.",
            )
        response = SelectorListingResponse(
            id=str(row.id),
            field=row.field_name,
            selector=row.selector,
            success=row.success_count,
            failure=row.failure_count,
            confidence=row.confidence,
            discovery_method=row.discovery_method,
            discovery_score=row.discovery_score,
            last_seen=row.last_seen_at,
        )

    logger.info("Admin: manual selector domain=%r field=%r", row.domain, row.field_name)
    return response


@router.post("/selectors/reset-counts", response_model=SelectorBatchResponse)
def reset_selector_counts(
    body: SelectorBatchRequest,
    db: Session = Depends(get_db),
) -> SelectorBatchResponse:
    with db.begin():
        affected = SelectorRepository(db).reset_counts(body.ids)
    logger.info("Admin: reset counts for %d selector(s)", affected)
    return SelectorBatchResponse(affected=affected)


@router.post("/selectors/delete", response_model=SelectorBatchResponse)
def delete_selectors(
    body: SelectorBatchRequest,
    db: Session = Depends(get_db),
) -> SelectorBatchResponse:
    with db.begin():
        affected = SelectorRepository(db).delete(body.ids)
    logger.info("Admin: deleted %d selector(s)", affected)
    return SelectorBatchResponse(affected=affected)
