"""Preload worker logic.

``PreloadWorker.process`` is the consumer side of the preload queue. It is
safe to run more than once for the same item: relevance and freshness are
re-checked against the stores before anything is fetched.
"""

import logging
from collections.abc import Callable
from enum import Enum

from sqlalchemy.orm import Session

from jw_preload.models.base import unix_now
from jw_preload.services.invalidation import InvalidationNotifier
from jw_preload.services.metadata_client import MetadataClient, MetadataFetchError
from jw_preload.services.metadata_store import MetadataStore
from jw_preload.services.preload_queue import PreloadQueue, PreloadQueueItem
from jw_preload.services.relation_store import RelationStore

logger = logging.getLogger(__name__)


class PreloadOutcome(str, Enum):
    """What processing one media ID ended up doing."""

    PRUNED = "pruned"              # No relations left; metadata dropped
    FRESH = "fresh"                # Cache already newer than the request
    REFRESHED = "refreshed"        # Fetched and stored
    FETCH_FAILED = "fetch_failed"  # Fetch failed; nothing written
    DELETED = "deleted"            # Metadata dropped on request


class PreloadWorker:
    """Fetches, stores and announces metadata for one media ID at a time."""

    def __init__(
        self,
        db: Session,
        client: MetadataClient,
        notifier: InvalidationNotifier,
        queue: PreloadQueue | None = None,
        clock: Callable[[], int] = unix_now,
    ):
        self.db = db
        self.client = client
        self.notifier = notifier
        self.queue = queue
        self.clock = clock
        self.relations = RelationStore(db)
        self.metadata = MetadataStore(db)

    def process(self, item: PreloadQueueItem) -> PreloadOutcome:
        """Handle one dequeued preload request."""
        media_id = item.media_id
        if self.queue is not None:
            self.queue.clear_pending(media_id)

        if not self.relations.has_relations(media_id):
            self._prune(media_id)
            return PreloadOutcome.PRUNED

        cached = self.metadata.get(media_id)
        if cached is not None and cached.updated >= item.requested_at:
            logger.debug(
                f"Metadata for {media_id} updated at {cached.updated}, "
                f"request from {item.requested_at} already satisfied"
            )
            return PreloadOutcome.FRESH

        return self._fetch_and_store(media_id)

    def refresh(self, media_id: str) -> PreloadOutcome:
        """Fetch ``media_id`` now, regardless of how fresh the cache is.

        Media IDs no path references are pruned instead of fetched.
        """
        if not self.relations.has_relations(media_id):
            self._prune(media_id)
            return PreloadOutcome.PRUNED
        return self._fetch_and_store(media_id)

    def drop(self, media_id: str) -> PreloadOutcome:
        """Delete cached metadata and invalidate every path showing it."""
        self.metadata.delete([media_id])
        self.db.commit()

        paths = self.relations.paths_by_media_id(media_id)
        logger.info(f"Dropped metadata for {media_id}, invalidating {len(paths)} paths")
        self.notifier.invalidate(paths)
        return PreloadOutcome.DELETED

    def _prune(self, media_id: str) -> None:
        if self.metadata.prune([media_id]):
            logger.info(f"{media_id} is no longer referenced, pruned its metadata")
        self.db.commit()

    def _fetch_and_store(self, media_id: str) -> PreloadOutcome:
        try:
            value = self.client.fetch(media_id)
        except MetadataFetchError as e:
            logger.warning(f"Preload of {media_id} dropped, fetch failed: {e}")
            return PreloadOutcome.FETCH_FAILED

        self.metadata.upsert(media_id, value, now=self.clock())
        self.db.commit()

        # The last relation may have been removed while the fetch was in flight
        if not self.relations.has_relations(media_id):
            self._prune(media_id)
            return PreloadOutcome.PRUNED

        paths = self.relations.paths_by_media_id(media_id)
        logger.info(f"Stored metadata for {media_id}, invalidating {len(paths)} paths")
        self.notifier.invalidate(paths)
        return PreloadOutcome.REFRESHED
