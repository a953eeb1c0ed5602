"""
Repository-layer exceptions for the selector and category stores.
"""

from __future__ import annotations


class LearningRepositoryError(Exception):
    """Base exception for learning store failures."""


class UnsupportedDialectError(LearningRepositoryError):
    """Raised when the bound engine has no native upsert support in this layer."""
