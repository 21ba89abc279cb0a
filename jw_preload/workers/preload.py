"""Preload queue consumer tasks."""

import logging

from jw_preload.core.celery import celery_app
from jw_preload.core.database import get_sync_session
from jw_preload.services.preload_queue import PreloadQueueItem
from jw_preload.workers.helpers import build_preload_worker

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    name="jw_preload.workers.preload.preload_media",
    acks_late=True,
    reject_on_worker_lost=True,
)
def preload_media(self, media_id: str, requested_at: int) -> dict:
    """
    Make sure cached metadata for a media ID is at least as new as the request.

    Fetch failures are not retried; the next reconciliation or webhook for
    the media ID queues it again.

    Args:
        media_id: Media ID to preload
        requested_at: Unix timestamp of the preload request

    Returns:
        dict with the media ID and the processing outcome
    """
    item = PreloadQueueItem(media_id=media_id, requested_at=int(requested_at))
    logger.debug(f"Processing preload for {media_id} (task {self.request.id})")

    with get_sync_session() as db:
        outcome = build_preload_worker(db).process(item)

    return {
        "media_id": media_id,
        "requested_at": item.requested_at,
        "status": outcome.value,
    }
