"""Relation store: which media IDs appear on which paths.

All reads and writes of ``jw_preload_media_relations`` go through
:class:`RelationStore`. The (media_id, path) unique constraint is what keeps
concurrent reconciliations of the same path from creating duplicate rows.
"""

import logging
from collections.abc import Iterable

from sqlalchemy import delete, insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from jw_preload.models.base import unix_now
from jw_preload.models.media_relation import MediaRelation

logger = logging.getLogger(__name__)


class StoreWriteFailed(Exception):
    """Raised when a relation row could not be written."""

    def __init__(self, media_id: str, path: str, reason: str):
        self.media_id = media_id
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to store relation {media_id} -> {path}: {reason}")


class RelationStore:
    """Keyed table operations on media relations."""

    def __init__(self, db: Session):
        self.db = db

    # =========================================================================
    # Reads
    # =========================================================================

    def relations_by_path(self, path: str) -> list[MediaRelation]:
        """All relations recorded for ``path``."""
        result = self.db.execute(
            select(MediaRelation)
            .where(MediaRelation.path == path)
            .order_by(MediaRelation.media_id)
        )
        return list(result.scalars().all())

    def media_ids_by_path(self, path: str) -> set[str]:
        """Distinct media IDs recorded for ``path``."""
        result = self.db.execute(
            select(MediaRelation.media_id)
            .where(MediaRelation.path == path)
            .distinct()
        )
        return {row[0] for row in result.fetchall()}

    def paths_by_media_id(self, media_id: str) -> list[str]:
        """Paths ``media_id`` appears on, ordered."""
        result = self.db.execute(
            select(MediaRelation.path)
            .where(MediaRelation.media_id == media_id)
            .distinct()
            .order_by(MediaRelation.path)
        )
        return [row[0] for row in result.fetchall()]

    def relations_by_entity(self, entity_type: str, entity_id: int) -> list[MediaRelation]:
        """All relations owned by one content entity."""
        result = self.db.execute(
            select(MediaRelation).where(
                MediaRelation.entity_type == entity_type,
                MediaRelation.entity_id == entity_id,
            )
        )
        return list(result.scalars().all())

    def referenced_media_ids(self, media_ids: Iterable[str]) -> set[str]:
        """The subset of ``media_ids`` that still has at least one relation."""
        ids = list(set(media_ids))
        if not ids:
            return set()
        result = self.db.execute(
            select(MediaRelation.media_id)
            .where(MediaRelation.media_id.in_(ids))
            .distinct()
        )
        return {row[0] for row in result.fetchall()}

    def has_relations(self, media_id: str) -> bool:
        """Whether any path references ``media_id``."""
        return bool(self.referenced_media_ids([media_id]))

    # =========================================================================
    # Writes
    # =========================================================================

    def add_relation(
        self,
        media_id: str,
        path: str,
        entity_type: str | None = None,
        entity_id: int | None = None,
        created: int | None = None,
    ) -> None:
        """Insert one relation and commit it.

        An existing (media_id, path) pair is left as is.

        Raises:
            StoreWriteFailed: If the insert fails for any other reason. The
                session is rolled back, earlier commits stand.
        """
        values = {
            "media_id": media_id,
            "path": path,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "created": created if created is not None else unix_now(),
        }
        dialect = self.db.get_bind().dialect.name

        try:
            if dialect == "postgresql":
                stmt = pg_insert(MediaRelation).values(**values).on_conflict_do_nothing(
                    constraint="uq_jw_preload_media_relations_media_path",
                )
            elif dialect == "sqlite":
                stmt = sqlite_insert(MediaRelation).values(**values).on_conflict_do_nothing(
                    index_elements=["media_id", "path"],
                )
            else:
                stmt = insert(MediaRelation).values(**values)
            self.db.execute(stmt)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if dialect in ("postgresql", "sqlite"):
                raise StoreWriteFailed(media_id, path, str(e.orig)) from e
            # Plain INSERT: a unique violation means another writer got there first
            logger.debug(f"Relation {media_id} -> {path} already exists")
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreWriteFailed(media_id, path, str(e)) from e

    def delete_relations(self, path: str, media_ids: Iterable[str]) -> int:
        """Delete the relations between ``path`` and each of ``media_ids``."""
        ids = list(media_ids)
        if not ids:
            return 0
        result = self.db.execute(
            delete(MediaRelation).where(
                MediaRelation.path == path,
                MediaRelation.media_id.in_(ids),
            )
        )
        return result.rowcount

    def delete_relations_by_path(self, path: str) -> int:
        """Delete every relation for ``path``."""
        result = self.db.execute(
            delete(MediaRelation).where(MediaRelation.path == path)
        )
        return result.rowcount

    def delete_relations_by_entity(self, entity_type: str, entity_id: int) -> int:
        """Delete every relation owned by one content entity."""
        result = self.db.execute(
            delete(MediaRelation).where(
                MediaRelation.entity_type == entity_type,
                MediaRelation.entity_id == entity_id,
            )
        )
        return result.rowcount
