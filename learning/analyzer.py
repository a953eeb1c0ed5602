"""
learning/analyzer.py

Turns one capture event into selector and category store updates.

Passes, in order:
    1. discovered candidates  -> SelectorStore.record_discovered
    2. selectors actually used -> record_success / record_failure, decided by
       comparing the raw extraction with the user's final value
    3. category suggestion     -> CategoryStore.record_result

The analyzer holds no state between events and never raises on malformed
event content; anything it cannot interpret is skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Protocol

from learning.domain import normalize_domain
from learning.events import CaptureEvent
from learning.fields import FIELD_SPECS, TrackableField
from learning.logging_utils import log_event
from learning.matching import DEFAULT_PRICE_TOLERANCE, MatchOutcome, compare_values, is_blank

logger = logging.getLogger(__name__)


class SelectorStore(Protocol):
    def record_success(self, *, domain: str, field: TrackableField, selector: str) -> Any:
        ...

    def record_failure(self, *, domain: str, field: TrackableField, selector: str) -> Any:
        ...

    def record_discovered(
        self, *, domain: str, field: TrackableField, selector: str, score: float | None
    ) -> Any:
        ...


class CategoryStore(Protocol):
    def record_result(self, *, domain: str, category: str, success: bool) -> bool:
        ...


@dataclass
class CaptureAnalysisResult:
    """
    Diagnostic summary of one analysis run.
    """

    domain: str
    successes: int = 0
    failures: int = 0
    discovered: int = 0
    skipped_fields: list[str] = field(default_factory=list)
    categories_recorded: int = 0
    categories_discarded: int = 0

    @property
    def mutations(self) -> int:
        return self.successes + self.failures + self.discovered + self.categories_recorded

    def as_dict(self) -> dict[str, Any]:
        return {
            "domain": self.domain,
            "successes": self.successes,
            "failures": self.failures,
            "discovered": self.discovered,
            "skipped_fields": list(self.skipped_fields),
            "categories_recorded": self.categories_recorded,
            "categories_discarded": self.categories_discarded,
        }


class CaptureAnalyzer:
    def __init__(
        self,
        selectors: SelectorStore,
        categories: CategoryStore,
        *,
        price_tolerance: Decimal | float = DEFAULT_PRICE_TOLERANCE,
    ) -> None:
        self._selectors = selectors
        self._categories = categories
        self._price_tolerance = price_tolerance

    def analyze(self, event: CaptureEvent) -> CaptureAnalysisResult:
        domain = normalize_domain(event.domain)
        result = CaptureAnalysisResult(domain=domain)
        if not domain:
            log_event(logger, logging.INFO, "capture_skipped_blank_domain")
            return result

        self._process_discovered(domain, event, result)
        for tracked in FIELD_SPECS:
            self._process_field(domain, tracked, event, result)
        self._process_category(domain, event, result)
        return result

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def _process_discovered(
        self,
        domain: str,
        event: CaptureEvent,
        result: CaptureAnalysisResult,
    ) -> None:
        # Only the client's top candidate is recorded per field.
        for tracked, candidates in event.discovered_candidates.items():
            if not candidates:
                continue
            best = candidates[0]
            if not best.selector:
                continue

            self._selectors.record_discovered(
                domain=domain,
                field=tracked,
                selector=best.selector,
                score=best.score,
            )
            result.discovered += 1
            log_event(
                logger,
                logging.INFO,
                "selector_discovered",
                domain=domain,
                field=tracked.value,
                selector=best.selector,
                score=best.score,
            )

    def _process_field(
        self,
        domain: str,
        tracked: TrackableField,
        event: CaptureEvent,
        result: CaptureAnalysisResult,
    ) -> None:
        selector = event.selectors_used.get(tracked)
        if not selector:
            return

        raw_value = event.raw_value(tracked)
        final_value = event.final_value(tracked)
        outcome = compare_values(
            tracked,
            raw_value,
            final_value,
            price_tolerance=self._price_tolerance,
        )

        if outcome is MatchOutcome.NO_DATA:
            result.skipped_fields.append(tracked.value)
            return

        if outcome is MatchOutcome.MATCH:
            self._selectors.record_success(domain=domain, field=tracked, selector=selector)
            result.successes += 1
            log_event(
                logger,
                logging.INFO,
                "selector_success",
                domain=domain,
                field=tracked.value,
                selector=selector,
            )
        else:
            self._selectors.record_failure(domain=domain, field=tracked, selector=selector)
            result.failures += 1
            log_event(
                logger,
                logging.INFO,
                "selector_failure",
                domain=domain,
                field=tracked.value,
                selector=selector,
                raw=raw_value,
                final=final_value,
            )

    def _process_category(
        self,
        domain: str,
        event: CaptureEvent,
        result: CaptureAnalysisResult,
    ) -> None:
        final_category = event.final_category
        if is_blank(final_category):
            return

        suggested = event.suggested_category
        if not is_blank(suggested):
            self._record_category(domain, suggested, suggested == final_category, result)

        # The user's own choice is positive evidence unless the suggestion
        # already counted it.
        if is_blank(suggested) or suggested != final_category:
            self._record_category(domain, final_category, True, result)

    def _record_category(
        self,
        domain: str,
        category: str | None,
        success: bool,
        result: CaptureAnalysisResult,
    ) -> None:
        recorded = self._categories.record_result(
            domain=domain,
            category=category or "",
            success=success,
        )
        if recorded:
            result.categories_recorded += 1
            log_event(
                logger,
                logging.INFO,
                "category_result",
                domain=domain,
                category=category,
                success=success,
            )
        else:
            result.categories_discarded += 1
            log_event(
                logger,
                logging.DEBUG,
                "category_discarded",
                domain=domain,
                category=category,
            )
