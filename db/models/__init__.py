"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.capture_sample import ProductCaptureSample
from db.models.domain_category import DomainCategory, ProductCategory, VALID_CATEGORIES
from db.models.domain_selector import DomainSelector

__all__ = [
    "DomainCategory",
    "DomainSelector",
    "ProductCaptureSample",
    "ProductCategory",
    "VALID_CATEGORIES",
]
