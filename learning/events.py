"""
learning/events.py

Read-only view of one stored capture sample, shaped for analysis.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping

from learning.fields import FIELD_SPECS, TrackableField, resolve_field
from learning.matching import is_blank, to_decimal


@dataclass(frozen=True)
class DiscoveredCandidate:
    selector: str
    score: float = 0.0


@dataclass(frozen=True)
class CaptureEvent:
    """
    One capture: what the client extracted, what the user kept, which
    selectors produced the extraction and which candidates client-side
    discovery proposed after a correction.

    ``discovered_candidates`` only carries fields with at least one
    candidate, in client priority order.
    """

    domain: str
    raw_fields: Mapping[str, Any] = field(default_factory=dict)
    final_fields: Mapping[str, Any] = field(default_factory=dict)
    selectors_used: Mapping[TrackableField, str] = field(default_factory=dict)
    discovered_candidates: Mapping[TrackableField, tuple[DiscoveredCandidate, ...]] = field(
        default_factory=dict
    )
    suggested_category: str | None = None
    final_category: str | None = None

    def raw_value(self, tracked: TrackableField) -> Any:
        return self.raw_fields.get(FIELD_SPECS[tracked].raw_key)

    def final_value(self, tracked: TrackableField) -> Any:
        """
        Final value converted into the raw payload's unit. Scaled values
        are exact ``Decimal`` (19999 cents -> ``Decimal("199.99")``).
        """
        spec = FIELD_SPECS[tracked]
        value = self.final_fields.get(spec.final_key)
        if spec.final_divisor == 1.0 or is_blank(value):
            return value
        number = to_decimal(value)
        if number is None:
            return None
        return number / Decimal(str(spec.final_divisor))

    @classmethod
    def from_storage(
        cls,
        *,
        domain: object,
        raw_payload: object,
        final_payload: object,
        context: object,
    ) -> CaptureEvent:
        """
        Build an event from the persisted sample columns.

        Malformed shapes are dropped rather than rejected: anything that is
        not the expected mapping/list is treated as absent.
        """

        raw = raw_payload if isinstance(raw_payload, Mapping) else {}
        final = final_payload if isinstance(final_payload, Mapping) else {}
        ctx = context if isinstance(context, Mapping) else {}

        return cls(
            domain=str(domain or "").strip(),
            raw_fields=dict(raw),
            final_fields=dict(final),
            selectors_used=_parse_selectors(ctx.get("selectors")),
            discovered_candidates=_parse_discovered(ctx.get("discovered_selectors")),
            suggested_category=_optional_str(ctx.get("suggested_category")),
            final_category=_optional_str(final.get("category")),
        )


def _optional_str(value: object) -> str | None:
    if is_blank(value) or not isinstance(value, str):
        return None
    return value.strip()


def _parse_selectors(value: object) -> dict[TrackableField, str]:
    if not isinstance(value, Mapping):
        return {}

    selectors: dict[TrackableField, str] = {}
    for key, selector in value.items():
        tracked = resolve_field(key)
        if tracked is None:
            continue
        if isinstance(selector, str) and selector.strip():
            selectors[tracked] = selector.strip()
    return selectors


def _parse_discovered(value: object) -> dict[TrackableField, tuple[DiscoveredCandidate, ...]]:
    if not isinstance(value, Mapping):
        return {}

    discovered: dict[TrackableField, tuple[DiscoveredCandidate, ...]] = {}
    for key, payload in value.items():
        tracked = resolve_field(key)
        if tracked is None or not isinstance(payload, Mapping):
            continue
        candidates = payload.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            continue

        parsed: list[DiscoveredCandidate] = []
        for candidate in candidates:
            if not isinstance(candidate, Mapping):
                parsed.append(DiscoveredCandidate(selector=""))
                continue
            selector = candidate.get("selector")
            parsed.append(
                DiscoveredCandidate(
                    selector=selector.strip() if isinstance(selector, str) else "",
                    score=_score(candidate.get("score")),
                )
            )
        discovered[tracked] = tuple(parsed)
    return discovered


def _score(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)
