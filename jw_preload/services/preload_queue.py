"""Preload queue: requests to refresh metadata for a media ID.

Items travel as Celery tasks on the preload queue, so delivery is
at-least-once and a media ID may be processed more than once. A Redis
marker per media ID keeps repeated page views from flooding the queue while
a preload is already waiting.
"""

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import redis
from kombu.exceptions import KombuError

from jw_preload.core.config import settings
from jw_preload.core.redis import pending_preload_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreloadQueueItem:
    """Ensure metadata for ``media_id`` is at least as new as ``requested_at``."""

    media_id: str
    requested_at: int

    def __post_init__(self) -> None:
        if not self.media_id:
            raise ValueError("media_id must not be empty")
        if self.requested_at <= 0:
            raise ValueError(f"requested_at must be positive, got {self.requested_at}")

    def to_payload(self) -> dict[str, Any]:
        return {"media_id": self.media_id, "requested_at": self.requested_at}

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "PreloadQueueItem":
        return cls(media_id=str(payload["media_id"]), requested_at=int(payload["requested_at"]))


class PreloadTask(Protocol):
    """The subset of a Celery task the queue uses."""

    def apply_async(self, args: Any = None, kwargs: Any = None, **options: Any) -> Any: ...


def _default_task() -> PreloadTask:
    # Imported lazily: the worker module imports the services package
    from jw_preload.workers.preload import preload_media

    return preload_media


class PreloadQueue:
    """Producer side of the preload queue.

    Created once per process and handed to the reconciler, the webhook
    handler and the worker.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        task: PreloadTask | None = None,
        queue_name: str | None = None,
        pending_ttl: int | None = None,
    ):
        self._redis = redis_client
        self._task = task
        self.queue_name = queue_name or settings.preload_queue_name
        self.pending_ttl = pending_ttl or settings.preload_pending_ttl

    @property
    def task(self) -> PreloadTask:
        if self._task is None:
            self._task = _default_task()
        return self._task

    def _mark_pending(self, media_id: str) -> bool:
        """Set the pending marker. False if a preload is already queued."""
        if self._redis is None:
            return True
        try:
            return bool(
                self._redis.set(pending_preload_key(media_id), "1", nx=True, ex=self.pending_ttl)
            )
        except redis.RedisError as e:
            logger.warning(f"Could not set pending marker for {media_id}, enqueueing anyway: {e}")
            return True

    def clear_pending(self, media_id: str) -> None:
        """Drop the pending marker once a worker has taken the item."""
        if self._redis is None:
            return
        try:
            self._redis.delete(pending_preload_key(media_id))
        except redis.RedisError as e:
            logger.warning(f"Could not clear pending marker for {media_id}: {e}")

    def enqueue(self, item: PreloadQueueItem) -> bool:
        """Send ``item`` to the workers.

        Returns:
            True if a task was sent, False if one was already pending or
            the broker could not be reached.
        """
        if not self._mark_pending(item.media_id):
            logger.debug(f"Preload for {item.media_id} already pending, not re-queued")
            return False

        try:
            self.task.apply_async(kwargs=item.to_payload(), queue=self.queue_name)
        except KombuError as e:
            # Leave no marker behind for an item that never reached the broker
            self.clear_pending(item.media_id)
            logger.error(f"Could not queue preload for {item.media_id}: {e}")
            return False

        logger.info(f"Queued preload for {item.media_id} (requested_at={item.requested_at})")
        return True
