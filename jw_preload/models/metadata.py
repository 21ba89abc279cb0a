"""Cached media metadata model."""

import json
from typing import Any

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from jw_preload.models.base import Base, TimestampMixin


class Metadata(Base, TimestampMixin):
    """Preloaded metadata document for one media ID.

    ``value`` is the serialized body exactly as the metadata API returned it.
    ``updated`` is the freshness marker compared against preload requests.
    """

    __tablename__ = "jw_preload_metadata"

    media_id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )
    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    def document(self) -> Any:
        """Decode the stored JSON body."""
        return json.loads(self.value)

    def __repr__(self) -> str:
        return f"<Metadata {self.media_id} updated={self.updated}>"
