"""
Per-domain learning analytics for administrators.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from db.models.domain_selector import DomainSelector
from db.repositories.capture_sample_repository import CaptureSampleRepository
from db.repositories.selector_repository import SelectorRepository
from learning.fields import STORED_FIELD_NAMES, DiscoveryMethod


@dataclass(frozen=True)
class DomainSummary:
    domain: str
    total_samples: int
    selector_count: int
    discovered_count: int
    avg_confidence: float
    field_confidence: dict[str, float | None]
    last_sample_at: datetime | None


@dataclass(frozen=True)
class LearningOverview:
    total_domains: int
    total_selectors: int
    discovered_selectors: int
    total_samples: int
    domains: list[DomainSummary]


class DomainAnalyticsService:
    """
    Summarizes selector coverage per domain. A field's confidence is that of
    its most confident selector; ``None`` means no selector is known.
    """

    def __init__(self, db: Session) -> None:
        self._selectors = SelectorRepository(db)
        self._samples = CaptureSampleRepository(db)

    def overview(self) -> LearningOverview:
        domains = [self.summarize(domain) for domain in self._selectors.list_domains()]
        domains.sort(key=lambda summary: (-summary.total_samples, summary.domain))

        return LearningOverview(
            total_domains=len(domains),
            total_selectors=sum(summary.selector_count for summary in domains),
            discovered_selectors=sum(summary.discovered_count for summary in domains),
            total_samples=self._samples.count_all(),
            domains=domains,
        )

    def summarize(self, domain: str) -> DomainSummary:
        rows = self._selectors.for_domain(domain)
        confidences = [row.confidence for row in rows]

        return DomainSummary(
            domain=domain,
            total_samples=self._samples.count_for_domain(domain),
            selector_count=len(rows),
            discovered_count=sum(
                1 for row in rows if row.discovery_method == DiscoveryMethod.DISCOVERED
            ),
            avg_confidence=round(sum(confidences) / len(confidences), 4) if confidences else 0.0,
            field_confidence={
                field_name: _best_confidence(rows, field_name) for field_name in STORED_FIELD_NAMES
            },
            last_sample_at=self._samples.last_capture_at(domain),
        )


def _best_confidence(rows: list[DomainSelector], field_name: str) -> float | None:
    values = [row.confidence for row in rows if row.field_name == field_name]
    return max(values) if values else None
