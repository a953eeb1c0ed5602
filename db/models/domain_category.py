"""
db/models/domain_category.py

Reliability counters for product-category suggestions per domain.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, validates

from db.base import Base, TimestampMixin
from learning.confidence import wilson_lower_bound
from learning.domain import normalize_domain
from learning.fields import DiscoveryMethod

UNIQUE_CONSTRAINT = "uq_domain_categories_domain_category"


class ProductCategory:
    MEBLE = "meble"
    TKANINY = "tkaniny"
    DEKORACJE = "dekoracje"
    ARMATURA_I_CERAMIKA = "armatura_i_ceramika"
    OSWIETLENIE = "oswietlenie"
    OKLADZINY_SCIENNE = "okladziny_scienne"
    AGD = "agd"


VALID_CATEGORIES: frozenset[str] = frozenset(
    {
        ProductCategory.MEBLE,
        ProductCategory.TKANINY,
        ProductCategory.DEKORACJE,
        ProductCategory.ARMATURA_I_CERAMIKA,
        ProductCategory.OSWIETLENIE,
        ProductCategory.OKLADZINY_SCIENNE,
        ProductCategory.AGD,
    }
)


class DomainCategory(Base, TimestampMixin):
    __tablename__ = "domain_categories"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    domain: Mapped[str] = mapped_column(String(255), nullable=False)
    category_value: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="One of VALID_CATEGORIES",
    )
    success_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    failure_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    discovery_method: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=DiscoveryMethod.HEURISTIC,
        server_default=DiscoveryMethod.HEURISTIC,
    )
    last_seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("domain", "category_value", name=UNIQUE_CONSTRAINT),
        Index("ix_domain_categories_domain", "domain"),
    )

    @validates("domain")
    def _normalize_domain(self, _key: str, value: str) -> str:
        return normalize_domain(value)

    @property
    def total_samples(self) -> int:
        return (self.success_count or 0) + (self.failure_count or 0)

    @property
    def confidence(self) -> float:
        return wilson_lower_bound(self.success_count or 0, self.failure_count or 0)
