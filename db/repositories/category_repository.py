"""
db/repositories/category_repository.py

Persistence for DomainCategory suggestion-reliability records.

Mirrors SelectorRepository without the selector dimension. Values outside
VALID_CATEGORIES are rejected without creating a row; rejections are
counted on ``discarded`` so callers can report them.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from db.base import utcnow
from db.models.domain_category import VALID_CATEGORIES, DomainCategory
from db.repositories.dialects import upsert_insert
from db.repositories.types import CategorySuggestion, CategoryTotals
from learning.domain import domain_variants, normalize_domain

logger = logging.getLogger(__name__)

_CONFLICT_KEY = ("domain", "category_value")

DEFAULT_MIN_SAMPLES = 2
DEFAULT_MIN_CONFIDENCE = 0.3


class CategoryRepository:
    def __init__(self, session: Session) -> None:
        self._session = session
        self.discarded = 0

    def record_result(self, *, domain: str, category: str, success: bool) -> bool:
        """
        Count one suggestion outcome for ``(domain, category)``.

        Returns ``False`` (and increments ``discarded``) when the category is
        not a valid value or the domain is blank; no row is created.
        """
        normalized = normalize_domain(domain)
        value = category.strip() if isinstance(category, str) else ""
        if value not in VALID_CATEGORIES or not normalized:
            self.discarded += 1
            logger.debug("Category result discarded domain=%r category=%r", domain, category)
            return False

        now = utcnow()
        counter = "success_count" if success else "failure_count"
        column = DomainCategory.success_count if success else DomainCategory.failure_count

        stmt = (
            upsert_insert(self._session, DomainCategory)
            .values(
                id=uuid.uuid4(),
                domain=normalized,
                category_value=value,
                success_count=1 if success else 0,
                failure_count=0 if success else 1,
                last_seen_at=now,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_update(
                index_elements=list(_CONFLICT_KEY),
                set_={counter: column + 1, "last_seen_at": now, "updated_at": now},
            )
        )
        self._session.execute(stmt)
        return True

    def get(self, *, domain: str, category: str) -> DomainCategory | None:
        stmt = (
            select(DomainCategory)
            .where(
                DomainCategory.domain == normalize_domain(domain),
                DomainCategory.category_value == category,
            )
            .execution_options(populate_existing=True)
        )
        return self._session.scalars(stmt).one_or_none()

    def for_domain(self, domain: str) -> list[DomainCategory]:
        if not normalize_domain(domain):
            return []
        stmt = (
            select(DomainCategory)
            .where(DomainCategory.domain.in_(domain_variants(domain)))
            .order_by(DomainCategory.category_value)
            .execution_options(populate_existing=True)
        )
        return list(self._session.scalars(stmt).all())

    def ranked_for_domain(
        self,
        domain: str,
        *,
        min_samples: int = DEFAULT_MIN_SAMPLES,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    ) -> list[CategorySuggestion]:
        """
        Categories with enough evidence, highest confidence first; equal
        confidence falls back to category name order.
        """
        qualifying = [
            row
            for row in self.for_domain(domain)
            if row.total_samples >= min_samples and row.confidence >= min_confidence
        ]
        qualifying.sort(key=lambda row: (-row.confidence, row.category_value))
        return [
            CategorySuggestion(
                category=row.category_value,
                confidence=row.confidence,
                samples=row.total_samples,
            )
            for row in qualifying
        ]

    def best_for_domain(
        self,
        domain: str,
        *,
        min_samples: int = DEFAULT_MIN_SAMPLES,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    ) -> CategorySuggestion | None:
        ranked = self.ranked_for_domain(
            domain,
            min_samples=min_samples,
            min_confidence=min_confidence,
        )
        return ranked[0] if ranked else None

    def domain_totals(self, domain: str) -> CategoryTotals:
        if not normalize_domain(domain):
            return CategoryTotals(total_records=0, total_samples=0)
        stmt = select(
            func.count(DomainCategory.id),
            func.coalesce(func.sum(DomainCategory.success_count + DomainCategory.failure_count), 0),
        ).where(DomainCategory.domain.in_(domain_variants(domain)))
        total_records, total_samples = self._session.execute(stmt).one()
        return CategoryTotals(total_records=int(total_records), total_samples=int(total_samples))
