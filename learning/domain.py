"""
learning/domain.py

Canonical domain keys for the selector and category stores.
"""

from __future__ import annotations

_WWW_PREFIX = "www."


def normalize_domain(value: object) -> str:
    """
    Lowercase, trim and strip one leading ``www.`` from a hostname.

    No validation is performed; blank or garbage input yields whatever the
    transformation produces (possibly an empty string).
    """

    domain = str(value or "").strip().lower()
    if domain.startswith(_WWW_PREFIX):
        domain = domain[len(_WWW_PREFIX):]
    return domain


def domain_variants(value: object) -> tuple[str, str]:
    """
    Return the spellings a stored row may carry for one host:
    ``(canonical, "www." + canonical)``.

    Rows written before normalization was enforced can still use the
    prefixed form, so every lookup matches both.
    """

    canonical = normalize_domain(value)
    return canonical, f"{_WWW_PREFIX}{canonical}"
