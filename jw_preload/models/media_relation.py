"""Media relation model: a media ID appearing on a path."""

from sqlalchemy import BigInteger, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from jw_preload.models.base import Base, CreatedMixin


class MediaRelation(Base, CreatedMixin):
    """Records that ``media_id`` appears on the internal, non-alias ``path``.

    ``entity_type``/``entity_id`` optionally point at the content object that
    owns the path so relations can be dropped in bulk when it is deleted.
    """

    __tablename__ = "jw_preload_media_relations"
    __table_args__ = (
        UniqueConstraint("media_id", "path", name="uq_jw_preload_media_relations_media_path"),
        Index("ix_jw_preload_media_relations_entity", "entity_type", "entity_id"),
    )

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    media_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )
    path: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        index=True,
    )
    entity_type: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
    )
    entity_id: Mapped[int | None] = mapped_column(
        BigInteger,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<MediaRelation {self.media_id} on {self.path}>"
