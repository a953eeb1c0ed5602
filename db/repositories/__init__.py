"""
Repository layer exports.
"""

from db.repositories.capture_sample_repository import CaptureSampleRepository
from db.repositories.category_repository import CategoryRepository
from db.repositories.errors import LearningRepositoryError, UnsupportedDialectError
from db.repositories.selector_repository import SelectorRepository
from db.repositories.types import (
    CategorySuggestion,
    CategoryTotals,
    FieldStats,
    SelectorListing,
    SelectorStats,
)

__all__ = [
    "CaptureSampleRepository",
    "CategoryRepository",
    "SelectorRepository",
    "CategorySuggestion",
    "CategoryTotals",
    "FieldStats",
    "SelectorListing",
    "SelectorStats",
    "LearningRepositoryError",
    "UnsupportedDialectError",
]
