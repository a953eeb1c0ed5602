"""
learning/matching.py

Field-specific equivalence rules between a machine-extracted value and the
value the user finally confirmed.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum

from learning.fields import TrackableField

DEFAULT_PRICE_TOLERANCE = Decimal("0.02")


class MatchOutcome(str, Enum):
    MATCH = "match"
    MISMATCH = "mismatch"
    NO_DATA = "no_data"


def is_blank(value: object) -> bool:
    """
    ``None``, ``False``, whitespace-only strings and empty containers are
    blank. Numeric zero is a value.
    """

    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def normalize_text(value: object) -> str:
    """Trim, lowercase and collapse internal whitespace."""
    if is_blank(value):
        return ""
    return " ".join(str(value).split()).lower()


def normalize_url(value: object) -> str:
    """Trim, lowercase and drop the query string."""
    if is_blank(value):
        return ""
    return str(value).strip().lower().split("?", 1)[0]


def to_decimal(value: object) -> Decimal | None:
    """
    Coerce a payload value to an exact ``Decimal``. Floats go through their
    shortest ``repr`` so ``299.99`` becomes ``Decimal("299.99")``. Returns
    ``None`` for anything that is not a finite number (including booleans).
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace(" ", "")
        try:
            number = Decimal(text)
        except InvalidOperation:
            try:
                number = Decimal(text.replace(",", "."))
            except InvalidOperation:
                return None
    else:
        return None
    return number if number.is_finite() else None


def compare_values(
    field: TrackableField,
    raw: object,
    final: object,
    *,
    price_tolerance: Decimal | float = DEFAULT_PRICE_TOLERANCE,
) -> MatchOutcome:
    """Compare a raw extraction against the user-confirmed value.

    Both blank means there is nothing to learn from. Exactly one blank is a
    mismatch: the selector captured nothing, or captured something the user
    discarded.

    Price values are compared exactly as ``Decimal`` and match when their
    absolute difference is strictly below ``price_tolerance``, so a
    two-cent correction never counts as a match.
    ``final`` must already be in the raw value's unit.
    """
    raw_blank = is_blank(raw)
    final_blank = is_blank(final)
    if raw_blank and final_blank:
        return MatchOutcome.NO_DATA
    if raw_blank or final_blank:
        return MatchOutcome.MISMATCH

    if field is TrackableField.NAME:
        matched = normalize_text(raw) == normalize_text(final)
    elif field is TrackableField.PRICE:
        raw_number = to_decimal(raw)
        final_number = to_decimal(final)
        tolerance = to_decimal(price_tolerance)
        matched = (
            raw_number is not None
            and final_number is not None
            and tolerance is not None
            and abs(raw_number - final_number) < tolerance
        )
    elif field is TrackableField.THUMBNAIL:
        matched = normalize_url(raw) == normalize_url(final)
    else:
        matched = str(raw) == str(final)

    return MatchOutcome.MATCH if matched else MatchOutcome.MISMATCH
