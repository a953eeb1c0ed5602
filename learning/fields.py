"""
learning/fields.py

Closed vocabulary of trackable product fields and the mapping between the
engine's field names and the keys used by capture payloads and storage.

Capture clients use three different vocabularies for the same field:

    engine      selector key   raw payload     final payload       stored
    ---------   ------------   -------------   -----------------   -------------
    name        name           name            name                name
    price       price          unit_price      unit_price_cents    price
    thumbnail   thumbnail      thumbnail_url   thumbnail_url       thumbnail_url

Every translation goes through ``FIELD_SPECS``; nothing else matches on
raw strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TrackableField(str, Enum):
    NAME = "name"
    PRICE = "price"
    THUMBNAIL = "thumbnail"


class DiscoveryMethod:
    HEURISTIC = "heuristic"
    DISCOVERED = "discovered"
    MANUAL = "manual"


DISCOVERY_METHODS: frozenset[str] = frozenset(
    {DiscoveryMethod.HEURISTIC, DiscoveryMethod.DISCOVERED, DiscoveryMethod.MANUAL}
)


@dataclass(frozen=True)
class FieldSpec:
    """
    Key mapping for one trackable field.

    ``final_divisor`` converts the final payload value into the raw
    payload's unit (cents -> currency units for price).
    """

    field: TrackableField
    stored_name: str
    selector_key: str
    raw_key: str
    final_key: str
    final_divisor: float = 1.0


FIELD_SPECS: dict[TrackableField, FieldSpec] = {
    TrackableField.NAME: FieldSpec(
        field=TrackableField.NAME,
        stored_name="name",
        selector_key="name",
        raw_key="name",
        final_key="name",
    ),
    TrackableField.PRICE: FieldSpec(
        field=TrackableField.PRICE,
        stored_name="price",
        selector_key="price",
        raw_key="unit_price",
        final_key="unit_price_cents",
        final_divisor=100.0,
    ),
    TrackableField.THUMBNAIL: FieldSpec(
        field=TrackableField.THUMBNAIL,
        stored_name="thumbnail_url",
        selector_key="thumbnail",
        raw_key="thumbnail_url",
        final_key="thumbnail_url",
    ),
}

# Every spelling a client or a stored row may use for a field.
_ALIASES: dict[str, TrackableField] = {
    key: spec.field
    for spec in FIELD_SPECS.values()
    for key in (spec.field.value, spec.stored_name, spec.selector_key)
}

STORED_FIELD_NAMES: tuple[str, ...] = tuple(spec.stored_name for spec in FIELD_SPECS.values())


def resolve_field(key: object) -> TrackableField | None:
    """
    Map any known field spelling to its ``TrackableField``.
    Unknown keys return ``None``.
    """

    if isinstance(key, TrackableField):
        return key
    if not isinstance(key, str):
        return None
    return _ALIASES.get(key.strip().lower())


def stored_name(field: TrackableField) -> str:
    return FIELD_SPECS[field].stored_name
