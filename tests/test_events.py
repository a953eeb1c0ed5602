from __future__ import annotations

from decimal import Decimal

from learning.events import CaptureEvent, DiscoveredCandidate
from learning.fields import TrackableField


def _event(**overrides: object) -> CaptureEvent:
    params: dict[str, object] = {
        "domain": "www.ikea.pl",
        "raw_payload": {"name": "Chair", "unit_price": 199.99},
        "final_payload": {"name": "chair", "unit_price_cents": 19999, "category": "meble"},
        "context": {
            "selectors": {"name": "h1", "price": ".price", "thumbnail": "img.main"},
            "discovered_selectors": {
                "price": {
                    "candidates": [
                        {"selector": ".price-new", "score": 85},
                        {"selector": ".price-old", "score": 40},
                    ]
                }
            },
            "suggested_category": "meble",
        },
    }
    params.update(overrides)
    return CaptureEvent.from_storage(**params)  # type: ignore[arg-type]


class TestFromStorage:
    def test_parses_selectors_by_any_alias(self) -> None:
        event = _event()
        assert event.selectors_used == {
            TrackableField.NAME: "h1",
            TrackableField.PRICE: ".price",
            TrackableField.THUMBNAIL: "img.main",
        }

    def test_keeps_candidates_in_client_order(self) -> None:
        event = _event()
        assert event.discovered_candidates[TrackableField.PRICE] == (
            DiscoveredCandidate(selector=".price-new", score=85.0),
            DiscoveredCandidate(selector=".price-old", score=40.0),
        )

    def test_categories(self) -> None:
        event = _event()
        assert event.suggested_category == "meble"
        assert event.final_category == "meble"

    def test_unknown_selector_keys_and_blank_selectors_dropped(self) -> None:
        event = _event(context={"selectors": {"description": ".desc", "name": "  ", "thumbnail_url": "img"}})
        assert event.selectors_used == {TrackableField.THUMBNAIL: "img"}

    def test_malformed_context_is_treated_as_absent(self) -> None:
        event = _event(context=["not", "a", "mapping"])
        assert event.selectors_used == {}
        assert event.discovered_candidates == {}
        assert event.suggested_category is None

    def test_malformed_candidate_becomes_blank_selector(self) -> None:
        event = _event(
            context={"discovered_selectors": {"name": {"candidates": ["oops", {"selector": ".t", "score": "x"}]}}}
        )
        assert event.discovered_candidates[TrackableField.NAME] == (
            DiscoveredCandidate(selector=""),
            DiscoveredCandidate(selector=".t", score=0.0),
        )

    def test_empty_candidate_list_is_omitted(self) -> None:
        event = _event(context={"discovered_selectors": {"name": {"candidates": []}}})
        assert event.discovered_candidates == {}

    def test_payloads_default_to_empty(self) -> None:
        event = _event(raw_payload=None, final_payload="garbage")
        assert event.raw_fields == {}
        assert event.final_fields == {}
        assert event.final_category is None


class TestValueAccess:
    def test_price_final_value_converted_from_cents(self) -> None:
        event = _event()
        assert event.raw_value(TrackableField.PRICE) == 199.99
        assert event.final_value(TrackableField.PRICE) == Decimal("199.99")

    def test_non_numeric_cents_yield_none(self) -> None:
        event = _event(final_payload={"unit_price_cents": "n/a"})
        assert event.final_value(TrackableField.PRICE) is None

    def test_missing_value_is_none(self) -> None:
        event = _event()
        assert event.raw_value(TrackableField.THUMBNAIL) is None
        assert event.final_value(TrackableField.THUMBNAIL) is None
