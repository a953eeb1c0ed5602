"""
db/repositories/selector_repository.py

Persistence and selection logic for DomainSelector reliability records.

Every counter change is a single ``INSERT ... ON CONFLICT DO UPDATE``
statement that bumps the counter in SQL, so concurrent analyses of the same
(domain, field, selector) triple never lose an increment and never fail on
the unique constraint. The repository never commits; the caller controls
the transaction.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import Float, String, case, delete, literal, select, update
from sqlalchemy.orm import Session

from db.base import utcnow
from db.models.domain_selector import DomainSelector
from db.repositories.dialects import upsert_insert
from db.repositories.types import FieldStats, SelectorListing, SelectorStats
from learning.domain import domain_variants, normalize_domain
from learning.fields import (
    DISCOVERY_METHODS,
    STORED_FIELD_NAMES,
    DiscoveryMethod,
    TrackableField,
    resolve_field,
    stored_name,
)

logger = logging.getLogger(__name__)

_CONFLICT_KEY = ("domain", "field_name", "selector")

DEFAULT_MIN_SAMPLES = 2
DEFAULT_MIN_CONFIDENCE = 0.5
DISCOVERED_MIN_SAMPLES = 1
DISCOVERED_MIN_CONFIDENCE = 0.4


class SelectorRepository:
    """
    Repository for recording selector outcomes and choosing the best
    selector per field for a domain.

    Field arguments accept a ``TrackableField`` or any known spelling
    (``"thumbnail"``, ``"thumbnail_url"``, ...). Unknown fields, blank
    domains and blank selectors are ignored and return ``None``.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def record_success(
        self,
        *,
        domain: str,
        field: TrackableField | str,
        selector: str,
        discovery_method: str = DiscoveryMethod.HEURISTIC,
        discovery_score: float | None = None,
    ) -> DomainSelector | None:
        """
        Count one success for the triple, creating it when absent.

        A new row takes ``discovery_method``/``discovery_score`` as given.
        An existing ``heuristic`` row is upgraded to ``discovered`` when the
        caller asserts ``discovered``, and its score refreshed if one was
        supplied.
        """
        _require_method(discovery_method)
        key = self._key(domain, field, selector)
        if key is None:
            return None

        now = utcnow()
        set_: dict[str, Any] = {
            "success_count": DomainSelector.success_count + 1,
            "last_seen_at": now,
            "updated_at": now,
        }
        if discovery_method == DiscoveryMethod.DISCOVERED:
            is_heuristic = DomainSelector.discovery_method == DiscoveryMethod.HEURISTIC
            set_["discovery_method"] = case(
                (is_heuristic, literal(DiscoveryMethod.DISCOVERED, String)),
                else_=DomainSelector.discovery_method,
            )
            if discovery_score is not None:
                set_["discovery_score"] = case(
                    (is_heuristic, literal(float(discovery_score), Float)),
                    else_=DomainSelector.discovery_score,
                )

        return self._upsert(
            key,
            values={
                "success_count": 1,
                "failure_count": 0,
                "discovery_method": discovery_method,
                "discovery_score": discovery_score,
                "last_seen_at": now,
            },
            set_=set_,
        )

    def record_failure(
        self,
        *,
        domain: str,
        field: TrackableField | str,
        selector: str,
        discovery_method: str = DiscoveryMethod.HEURISTIC,
        discovery_score: float | None = None,
    ) -> DomainSelector | None:
        """
        Count one failure for the triple, creating it when absent.
        Failures never change an existing row's discovery tier.
        """
        _require_method(discovery_method)
        key = self._key(domain, field, selector)
        if key is None:
            return None

        now = utcnow()
        return self._upsert(
            key,
            values={
                "success_count": 0,
                "failure_count": 1,
                "discovery_method": discovery_method,
                "discovery_score": discovery_score,
                "last_seen_at": now,
            },
            set_={
                "failure_count": DomainSelector.failure_count + 1,
                "last_seen_at": now,
                "updated_at": now,
            },
        )

    def record_discovered(
        self,
        *,
        domain: str,
        field: TrackableField | str,
        selector: str,
        score: float | None,
    ) -> DomainSelector | None:
        """
        Record a selector revealed by a user correction.

        The correction itself is the first success, so a new row starts at
        ``success_count=1``. Method and score are always overwritten.
        """
        key = self._key(domain, field, selector)
        if key is None:
            return None

        now = utcnow()
        score_value = float(score) if score is not None else None
        return self._upsert(
            key,
            values={
                "success_count": 1,
                "failure_count": 0,
                "discovery_method": DiscoveryMethod.DISCOVERED,
                "discovery_score": score_value,
                "last_seen_at": now,
            },
            set_={
                "success_count": DomainSelector.success_count + 1,
                "discovery_method": DiscoveryMethod.DISCOVERED,
                "discovery_score": score_value,
                "last_seen_at": now,
                "updated_at": now,
            },
        )

    def upsert_manual(
        self,
        *,
        domain: str,
        field: TrackableField | str,
        selector: str,
        discovery_score: float | None = None,
    ) -> DomainSelector | None:
        """
        Register an administrator-entered selector. Counters are untouched.
        """
        key = self._key(domain, field, selector)
        if key is None:
            return None

        now = utcnow()
        return self._upsert(
            key,
            values={
                "success_count": 0,
                "failure_count": 0,
                "discovery_method": DiscoveryMethod.MANUAL,
                "discovery_score": discovery_score,
            },
            set_={
                "discovery_method": DiscoveryMethod.MANUAL,
                "discovery_score": discovery_score,
                "updated_at": now,
            },
        )

    def reset_counts(self, ids: Iterable[uuid.UUID]) -> int:
        """Administrative reset of both counters. Returns rows affected."""
        id_list = list(ids)
        if not id_list:
            return 0
        result = self._session.execute(
            update(DomainSelector)
            .where(DomainSelector.id.in_(id_list))
            .values(success_count=0, failure_count=0, updated_at=utcnow())
        )
        return int(result.rowcount or 0)

    def delete(self, ids: Iterable[uuid.UUID]) -> int:
        """Administrative removal. Returns rows deleted."""
        id_list = list(ids)
        if not id_list:
            return 0
        result = self._session.execute(
            delete(DomainSelector).where(DomainSelector.id.in_(id_list))
        )
        return int(result.rowcount or 0)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get(self, selector_id: uuid.UUID) -> DomainSelector | None:
        return self._session.get(DomainSelector, selector_id)

    def for_domain(
        self,
        domain: str,
        *,
        field: TrackableField | str | None = None,
    ) -> list[DomainSelector]:
        """
        All rows stored under either spelling of ``domain``, ordered by
        field name then selector.
        """
        if not normalize_domain(domain):
            return []

        stmt = (
            select(DomainSelector)
            .where(DomainSelector.domain.in_(domain_variants(domain)))
            .order_by(DomainSelector.field_name, DomainSelector.selector)
            .execution_options(populate_existing=True)
        )
        if field is not None:
            tracked = resolve_field(field)
            if tracked is None:
                return []
            stmt = stmt.where(DomainSelector.field_name == stored_name(tracked))
        return list(self._session.scalars(stmt).all())

    def best_for_domain(
        self,
        domain: str,
        *,
        min_samples: int = DEFAULT_MIN_SAMPLES,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
        discovered_min_samples: int = DISCOVERED_MIN_SAMPLES,
        discovered_min_confidence: float = DISCOVERED_MIN_CONFIDENCE,
    ) -> dict[str, str]:
        """
        Return ``{stored_field_name: selector}`` with the best selector per
        trackable field.

        Per field:
        1. Discovered selectors with at least ``discovered_min_samples``
           samples and ``discovered_min_confidence`` win, ranked by
           ``(confidence, discovery_score)``. They were validated by a human
           correction, hence the lower bar.
        2. Otherwise any selector with ``min_samples`` samples and
           ``min_confidence`` confidence, ranked by confidence.
        3. Otherwise the field is omitted.

        Ties resolve to the lexicographically smallest selector.
        """
        by_field = _group_by_field(self.for_domain(domain))

        results: dict[str, str] = {}
        for field_name in STORED_FIELD_NAMES:
            candidates = by_field.get(field_name, [])
            discovered = [
                row
                for row in candidates
                if row.discovery_method == DiscoveryMethod.DISCOVERED
                and row.total_samples >= discovered_min_samples
                and row.confidence >= discovered_min_confidence
            ]
            if discovered:
                best = max(discovered, key=lambda row: (row.confidence, row.discovery_score or 0.0))
                results[field_name] = best.selector
                continue

            reliable = [
                row
                for row in candidates
                if row.total_samples >= min_samples and row.confidence >= min_confidence
            ]
            if reliable:
                results[field_name] = max(reliable, key=lambda row: row.confidence).selector

        return results

    def all_for_domain(self, domain: str) -> list[SelectorListing]:
        """Every selector for the domain, by field then success count (desc)."""
        rows = sorted(
            self.for_domain(domain),
            key=lambda row: (row.field_name, -(row.success_count or 0), row.selector),
        )
        return [_to_listing(row) for row in rows]

    def domain_stats(self, domain: str) -> SelectorStats:
        rows = self.for_domain(domain)
        by_field = _group_by_field(rows)

        fields: list[FieldStats] = []
        for field_name in STORED_FIELD_NAMES:
            candidates = by_field.get(field_name, [])
            if not candidates:
                fields.append(FieldStats(field=field_name, selector_count=0))
                continue
            best = max(candidates, key=lambda row: row.confidence)
            fields.append(
                FieldStats(
                    field=field_name,
                    selector_count=len(candidates),
                    best_confidence=round(best.confidence, 2),
                    best_selector=best.selector,
                    best_discovery_method=best.discovery_method,
                )
            )

        return SelectorStats(
            total_selectors=len(rows),
            discovered_count=_count_method(rows, DiscoveryMethod.DISCOVERED),
            heuristic_count=_count_method(rows, DiscoveryMethod.HEURISTIC),
            manual_count=_count_method(rows, DiscoveryMethod.MANUAL),
            fields=fields,
        )

    def list_domains(self) -> list[str]:
        """Distinct normalized domains that have at least one selector."""
        stored = self._session.scalars(select(DomainSelector.domain).distinct()).all()
        return sorted({normalize_domain(domain) for domain in stored if normalize_domain(domain)})

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _key(
        self,
        domain: str,
        field: TrackableField | str,
        selector: str,
    ) -> tuple[str, str, str] | None:
        normalized = normalize_domain(domain)
        tracked = resolve_field(field)
        cleaned = selector.strip() if isinstance(selector, str) else ""

        if not normalized or tracked is None or not cleaned:
            logger.debug(
                "Selector record skipped domain=%r field=%r selector=%r",
                domain,
                field,
                selector,
            )
            return None
        return normalized, stored_name(tracked), cleaned

    def _upsert(
        self,
        key: tuple[str, str, str],
        *,
        values: dict[str, Any],
        set_: dict[str, Any],
    ) -> DomainSelector:
        domain, field_name, selector = key
        now: datetime = utcnow()
        insert_stmt = upsert_insert(self._session, DomainSelector).values(
            id=uuid.uuid4(),
            domain=domain,
            field_name=field_name,
            selector=selector,
            created_at=now,
            updated_at=now,
            **values,
        )
        self._session.execute(
            insert_stmt.on_conflict_do_update(index_elements=list(_CONFLICT_KEY), set_=set_)
        )

        stmt = (
            select(DomainSelector)
            .where(
                DomainSelector.domain == domain,
                DomainSelector.field_name == field_name,
                DomainSelector.selector == selector,
            )
            .execution_options(populate_existing=True)
        )
        return self._session.scalars(stmt).one()


# ---------------------------------------------------------------------------
# Module-level helpers (no persistence)
# ---------------------------------------------------------------------------


def _require_method(discovery_method: str) -> None:
    if discovery_method not in DISCOVERY_METHODS:
        raise ValueError(
            f"discovery_method must be one of {sorted(DISCOVERY_METHODS)}, got {discovery_method!r}."
        )


def _group_by_field(rows: Sequence[DomainSelector]) -> dict[str, list[DomainSelector]]:
    """Group rows by field name, each group sorted by selector string."""
    grouped: dict[str, list[DomainSelector]] = defaultdict(list)
    for row in sorted(rows, key=lambda r: r.selector):
        grouped[row.field_name].append(row)
    return grouped


def _count_method(rows: Sequence[DomainSelector], method: str) -> int:
    return sum(1 for row in rows if row.discovery_method == method)


def _to_listing(row: DomainSelector) -> SelectorListing:
    return SelectorListing(
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
