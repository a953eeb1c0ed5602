"""
db/models/domain_selector.py

Reliability counters for one (domain, field, selector) triple.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, validates

from db.base import Base, TimestampMixin
from learning.confidence import wilson_lower_bound
from learning.domain import normalize_domain
from learning.fields import DiscoveryMethod

UNIQUE_CONSTRAINT = "uq_domain_selectors_domain_field_selector"


class DomainSelector(Base, TimestampMixin):
    """
    One selector the capture client used (or discovered) for one field on
    one domain, with its success/failure evidence.

    ``confidence`` is derived from the counters on read and never stored.
    The unique constraint on ``(domain, field_name, selector)`` is the
    conflict target for the atomic upserts in SelectorRepository.
    """

    __tablename__ = "domain_selectors"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    domain: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Normalized host: lowercase, no leading www.",
    )
    field_name: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="name, price, thumbnail_url",
    )
    selector: Mapped[str] = mapped_column(Text, nullable=False)
    success_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    failure_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    discovery_method: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=DiscoveryMethod.HEURISTIC,
        server_default=DiscoveryMethod.HEURISTIC,
        comment="heuristic, discovered, manual",
    )
    discovery_score: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
        comment="Client-side discovery score, typically 0-100",
    )
    last_seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("domain", "field_name", "selector", name=UNIQUE_CONSTRAINT),
        Index("ix_domain_selectors_domain_field", "domain", "field_name"),
        Index("ix_domain_selectors_discovery_method", "discovery_method"),
        Index("ix_domain_selectors_success_count", "success_count"),
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
