"""
Repository for stored capture samples (the analyzer's input events).
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from db.models.capture_sample import ProductCaptureSample
from learning.domain import domain_variants, normalize_domain


class CaptureSampleRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_sample(
        self,
        *,
        url: str,
        domain: str,
        raw_payload: dict[str, Any] | None = None,
        final_payload: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
    ) -> ProductCaptureSample:
        sample = ProductCaptureSample(
            url=url,
            domain=normalize_domain(domain),
            raw_payload=raw_payload or {},
            final_payload=final_payload or {},
            context=context or {},
        )
        self._session.add(sample)
        self._session.flush()
        self._session.refresh(sample)
        return sample

    def get_sample(self, sample_id: uuid.UUID) -> ProductCaptureSample | None:
        return self._session.get(ProductCaptureSample, sample_id)

    def count_for_domain(self, domain: str) -> int:
        if not normalize_domain(domain):
            return 0
        stmt = select(func.count(ProductCaptureSample.id)).where(
            ProductCaptureSample.domain.in_(domain_variants(domain))
        )
        return int(self._session.scalar(stmt) or 0)

    def last_capture_at(self, domain: str) -> datetime | None:
        if not normalize_domain(domain):
            return None
        stmt = select(func.max(ProductCaptureSample.created_at)).where(
            ProductCaptureSample.domain.in_(domain_variants(domain))
        )
        return self._session.scalar(stmt)

    def count_all(self) -> int:
        return int(self._session.scalar(select(func.count(ProductCaptureSample.id))) or 0)
