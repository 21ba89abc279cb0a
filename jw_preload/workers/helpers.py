"""Shared helper functions for worker tasks.

Builds the per-process services the Celery tasks run with.
"""

import logging
from functools import lru_cache

from sqlalchemy.orm import Session

from jw_preload.core.redis import get_sync_redis
from jw_preload.services.invalidation import get_invalidation_notifier
from jw_preload.services.metadata_client import MetadataClient
from jw_preload.services.preload import PreloadWorker
from jw_preload.services.preload_queue import PreloadQueue

logger = logging.getLogger(__name__)


@lru_cache
def get_preload_queue() -> PreloadQueue:
    """The process-wide preload queue, created on first use."""
    return PreloadQueue(redis_client=get_sync_redis())


@lru_cache
def get_metadata_client() -> MetadataClient:
    return MetadataClient()


def build_preload_worker(db: Session) -> PreloadWorker:
    """A worker bound to ``db`` and the process-wide collaborators."""
    return PreloadWorker(
        db,
        client=get_metadata_client(),
        notifier=get_invalidation_notifier(),
        queue=get_preload_queue(),
    )
