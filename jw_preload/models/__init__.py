"""SQLAlchemy models."""

from jw_preload.models.base import Base
from jw_preload.models.media_relation import MediaRelation
from jw_preload.models.metadata import Metadata

__all__ = [
    "Base",
    "MediaRelation",
    "Metadata",
]
