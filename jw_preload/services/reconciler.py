"""Relation reconciler.

Makes the stored relations for a path match the media IDs currently found
on it, prunes metadata nobody references any more, and queues preloads for
media IDs that have no cached metadata yet. Runs inside the caller's
request, so it never talks to the metadata API itself.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any

from sqlalchemy.orm import Session

from jw_preload.models.base import unix_now
from jw_preload.models.metadata import Metadata
from jw_preload.services.discovery import DiscoveryRegistry, default_registry, unique_media_ids
from jw_preload.services.metadata_store import MetadataStore
from jw_preload.services.preload_queue import PreloadQueue, PreloadQueueItem
from jw_preload.services.relation_store import RelationStore, StoreWriteFailed

logger = logging.getLogger(__name__)


class RelationReconciler:
    """Diffs discovered media IDs against stored relations for one path."""

    def __init__(
        self,
        db: Session,
        queue: PreloadQueue,
        registry: DiscoveryRegistry | None = None,
        clock: Callable[[], int] = unix_now,
    ):
        self.db = db
        self.queue = queue
        self.registry = registry if registry is not None else default_registry
        self.clock = clock
        self.relations = RelationStore(db)
        self.metadata = MetadataStore(db)

    def reconcile_path(
        self,
        path: str,
        entity: Any = None,
        entity_type: str | None = None,
        entity_id: int | None = None,
    ) -> dict[str, Metadata]:
        """Discover the media IDs on ``path`` and reconcile against them."""
        media_ids = self.registry.discover(path, entity, entity_type, entity_id)
        return self.reconcile(path, media_ids, entity_type=entity_type, entity_id=entity_id)

    def reconcile(
        self,
        path: str,
        current_media_ids: Iterable[str],
        entity_type: str | None = None,
        entity_id: int | None = None,
    ) -> dict[str, Metadata]:
        """Record ``current_media_ids`` as the media on ``path``.

        Args:
            path: Internal, non-alias path
            current_media_ids: Media IDs found on the path right now
            entity_type: Type of the content entity owning the path, if any
            entity_id: ID of that entity, if any

        Returns:
            Cached metadata for the current media IDs, keyed by media ID.
            IDs whose metadata is not cached yet are missing from the
            mapping; a preload has been queued for them.
        """
        current = unique_media_ids(current_media_ids)
        now = self.clock()

        if not current:
            self._clear_path(path)
            return {}

        existing = self.relations.media_ids_by_path(path)

        stale = existing - set(current)
        if stale:
            self.relations.delete_relations(path, stale)
            self.metadata.prune(stale)
            self.db.commit()
            logger.info(f"Removed {len(stale)} stale media relations from {path}")

        fresh = [media_id for media_id in current if media_id not in existing]
        for media_id in fresh:
            try:
                self.relations.add_relation(media_id, path, entity_type, entity_id, created=now)
            except StoreWriteFailed as e:
                logger.error(f"{e}; will retry on next reconciliation of {path}")

        cached = self.metadata.by_media_ids(current)

        for media_id in current:
            if media_id not in cached:
                self.queue.enqueue(PreloadQueueItem(media_id, now))

        return cached

    def _clear_path(self, path: str) -> None:
        """Drop every relation on ``path`` and prune what that orphans."""
        previous = self.relations.media_ids_by_path(path)
        if not previous:
            return

        self.relations.delete_relations_by_path(path)
        pruned = self.metadata.prune(previous)
        self.db.commit()

        logger.info(
            f"Path {path} has no media any more: removed {len(previous)} relations, "
            f"pruned {pruned} metadata rows"
        )
