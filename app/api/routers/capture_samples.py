"""
app/api/routers/capture_samples.py

Capture sample intake. Storing a sample enqueues its analysis; the response
returns before the analysis runs.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_analysis_executor
from app.schemas.capture_samples import CaptureSampleAcceptedResponse, CaptureSampleCreateRequest
from app.services.capture_analysis_service import (
    AnalysisTaskExecutor,
    CaptureAnalysisService,
    get_capture_analysis_service,
)
from db.repositories.capture_sample_repository import CaptureSampleRepository
from db.session import get_db

router = APIRouter(prefix="/api/v1", tags=["capture-samples"])


@router.post(
    "/capture-samples",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=CaptureSampleAcceptedResponse,
)
def create_capture_sample(
    body: CaptureSampleCreateRequest,
    db: Session = Depends(get_db),
    executor: AnalysisTaskExecutor = Depends(get_analysis_executor),
    service: CaptureAnalysisService = Depends(get_capture_analysis_service),
) -> CaptureSampleAcceptedResponse:
    sample, enqueued = service.create_sample(
        db=db,
        executor=executor,
        url=body.url,
        domain=body.domain,
        raw_payload=body.raw_payload,
        final_payload=body.final_payload,
        context=body.context,
    )
    return CaptureSampleAcceptedResponse(
        sample_id=sample.id,
        domain=sample.domain,
        analysis_enqueued=enqueued,
        created_at=sample.created_at,
    )


@router.post(
    "/capture-samples/{sample_id}/analyze",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=CaptureSampleAcceptedResponse,
)
def reanalyze_capture_sample(
    sample_id: UUID,
    db: Session = Depends(get_db),
    executor: AnalysisTaskExecutor = Depends(get_analysis_executor),
    service: CaptureAnalysisService = Depends(get_capture_analysis_service),
) -> CaptureSampleAcceptedResponse:
    """
    Enqueue another analysis of a stored sample. Counters are incremented
    again; this is not deduplicated.
    """
    sample = CaptureSampleRepository(db).get_sample(sample_id)
    if sample is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Capture sample not found: {sample_id}",
        )

    return CaptureSampleAcceptedResponse(
        sample_id=sample.id,
        domain=sample.domain,
        analysis_enqueued=service.enqueue(executor=executor, sample_id=sample.id),
        created_at=sample.created_at,
    )
