"""Metadata cache store: one preloaded document per media ID."""

import logging
from collections.abc import Iterable

from sqlalchemy import case, delete, exists, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from jw_preload.models.base import unix_now
from jw_preload.models.media_relation import MediaRelation
from jw_preload.models.metadata import Metadata

logger = logging.getLogger(__name__)


class MetadataStore:
    """Keyed table operations on cached metadata."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, media_id: str) -> Metadata | None:
        """Cached metadata for ``media_id``, if any."""
        result = self.db.execute(
            select(Metadata).where(Metadata.media_id == media_id)
        )
        return result.scalar_one_or_none()

    def by_media_ids(self, media_ids: Iterable[str]) -> dict[str, Metadata]:
        """Cached metadata for ``media_ids``, keyed by media ID.

        IDs without a cached row are simply absent from the result.
        """
        ids = list(set(media_ids))
        if not ids:
            return {}
        result = self.db.execute(
            select(Metadata).where(Metadata.media_id.in_(ids))
        )
        return {row.media_id: row for row in result.scalars().all()}

    def upsert(self, media_id: str, value: str, now: int | None = None) -> None:
        """Insert or refresh the row for ``media_id``.

        Concurrent writers resolve last-writer-wins on ``value``; ``updated``
        never moves backwards.
        """
        now = now if now is not None else unix_now()
        dialect = self.db.get_bind().dialect.name

        # Atomic insert-or-update needs ON CONFLICT
        if dialect not in ("postgresql", "sqlite"):
            raise NotImplementedError(f"Metadata upsert is not supported on {dialect}")

        insert_fn = pg_insert if dialect == "postgresql" else sqlite_insert
        stmt = insert_fn(Metadata).values(
            media_id=media_id,
            value=value,
            created=now,
            updated=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Metadata.media_id],
            set_={
                "value": stmt.excluded.value,
                "updated": case(
                    (Metadata.updated > stmt.excluded.updated, Metadata.updated),
                    else_=stmt.excluded.updated,
                ),
            },
        )
        self.db.execute(stmt)

        # An instance already loaded in this session now holds old values
        loaded = self.db.identity_map.get(self.db.identity_key(Metadata, media_id))
        if loaded is not None:
            self.db.expire(loaded)

    def delete(self, media_ids: Iterable[str]) -> int:
        """Delete cached metadata for ``media_ids``."""
        ids = list(set(media_ids))
        if not ids:
            return 0
        result = self.db.execute(
            delete(Metadata).where(Metadata.media_id.in_(ids))
        )
        return result.rowcount

    def prune(self, media_ids: Iterable[str]) -> int:
        """Delete metadata for those of ``media_ids`` no relation references."""
        ids = list(set(media_ids))
        if not ids:
            return 0
        result = self.db.execute(
            delete(Metadata).where(
                Metadata.media_id.in_(ids),
                ~exists().where(MediaRelation.media_id == Metadata.media_id),
            )
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount:
            logger.debug(f"Pruned metadata for {result.rowcount} unreferenced media IDs")
        return result.rowcount

    def orphaned_media_ids(self) -> list[str]:
        """Media IDs with cached metadata but no relation."""
        result = self.db.execute(
            select(Metadata.media_id).where(
                ~exists().where(MediaRelation.media_id == Metadata.media_id)
            )
        )
        return [row[0] for row in result.fetchall()]

    def prune_all(self) -> int:
        """Delete every metadata row no relation references."""
        result = self.db.execute(
            delete(Metadata)
            .where(~exists().where(MediaRelation.media_id == Metadata.media_id))
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
