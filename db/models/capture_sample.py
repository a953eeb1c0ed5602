"""
db/models/capture_sample.py

Stored capture event: what the browser client extracted from a product
page, what the user finally saved, and the selector context of the capture.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONDocument, TimestampMixin


class ProductCaptureSample(Base, TimestampMixin):
    """
    ``context`` carries the selector information the analyzer reads::

        {
            "selectors": {"name": "h1", "price": ".price", "thumbnail": "img.main"},
            "discovered_selectors": {
                "name": {"candidates": [{"selector": ".product-title", "score": 85}]}
            },
            "suggested_category": "meble"
        }
    """

    __tablename__ = "product_capture_samples"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    url: Mapped[str] = mapped_column(Text, nullable=False)
    domain: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Host as reported by the capture client",
    )
    raw_payload: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=dict,
        comment="Machine-extracted field values",
    )
    final_payload: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=dict,
        comment="User-confirmed field values",
    )
    context: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=dict,
        comment="Selectors used, discovered candidates, suggested category",
    )

    __table_args__ = (
        Index("ix_product_capture_samples_domain", "domain"),
        Index("ix_product_capture_samples_created_at", "created_at"),
    )
