"""
Capture sample intake and asynchronous analysis dispatch.

A stored sample is analyzed once per dispatch in a worker thread with its
own session. Re-dispatching the same sample analyzes it again and counts
its evidence twice; at-most-once delivery is the caller's responsibility.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from functools import lru_cache
from typing import Any, Protocol

from sqlalchemy.orm import Session

from app.config import LearningSettings, get_learning_settings
from db.models.capture_sample import ProductCaptureSample
from db.repositories.capture_sample_repository import CaptureSampleRepository
from db.repositories.category_repository import CategoryRepository
from db.repositories.selector_repository import SelectorRepository
from learning.analyzer import CaptureAnalysisResult, CaptureAnalyzer
from learning.events import CaptureEvent
from learning.logging_utils import log_event

logger = logging.getLogger(__name__)


class AnalysisTaskExecutor(Protocol):
    def submit(self, task: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        ...


class CaptureAnalysisService:
    """
    Stores capture samples, dispatches their analysis and runs it.
    """

    def __init__(
        self,
        *,
        session_factory: Callable[[], Session] | None = None,
        settings: LearningSettings | None = None,
    ) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory
        self._settings = settings or get_learning_settings()

    def create_sample(
        self,
        *,
        db: Session,
        executor: AnalysisTaskExecutor,
        url: str,
        domain: str,
        raw_payload: dict[str, Any] | None = None,
        final_payload: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
    ) -> tuple[ProductCaptureSample, bool]:
        """
        Persist a sample, then enqueue its analysis.

        The sample is committed before dispatch so the worker can read it.
        Returns the sample and whether the analysis was enqueued.
        """
        repository = CaptureSampleRepository(db)
        with db.begin():
            sample = repository.create_sample(
                url=url,
                domain=domain,
                raw_payload=raw_payload,
                final_payload=final_payload,
                context=context,
            )

        return sample, self.enqueue(executor=executor, sample_id=sample.id)

    def enqueue(self, *, executor: AnalysisTaskExecutor, sample_id: uuid.UUID) -> bool:
        """Fire-and-forget analysis of one stored sample."""
        try:
            executor.submit(self.analyze_sample, sample_id)
        except Exception:  # noqa: BLE001
            logger.exception("Failed to schedule capture analysis sample_id=%s", sample_id)
            return False
        log_event(logger, logging.DEBUG, "capture_analysis_enqueued", sample_id=str(sample_id))
        return True

    def analyze_sample(self, sample_id: uuid.UUID) -> CaptureAnalysisResult | None:
        """
        Analyze one stored sample and commit the resulting counter updates.

        A missing sample is a logged no-op. Storage failures are logged and
        rolled back; nothing is re-raised into the worker.
        """
        with self._session_factory() as db:
            try:
                sample = CaptureSampleRepository(db).get_sample(sample_id)
                if sample is None:
                    log_event(
                        logger,
                        logging.WARNING,
                        "capture_sample_missing",
                        sample_id=str(sample_id),
                    )
                    return None

                event = CaptureEvent.from_storage(
                    domain=sample.domain,
                    raw_payload=sample.raw_payload,
                    final_payload=sample.final_payload,
                    context=sample.context,
                )
                analyzer = CaptureAnalyzer(
                    SelectorRepository(db),
                    CategoryRepository(db),
                    price_tolerance=self._settings.price_match_tolerance,
                )
                result = analyzer.analyze(event)
                db.commit()
            except Exception:  # noqa: BLE001
                db.rollback()
                logger.exception("Capture analysis failed sample_id=%s", sample_id)
                return None

        log_event(
            logger,
            logging.INFO,
            "capture_analyzed",
            sample_id=str(sample_id),
            **result.as_dict(),
        )
        return result


@lru_cache(maxsize=1)
def get_capture_analysis_service() -> CaptureAnalysisService:
    return CaptureAnalysisService()
