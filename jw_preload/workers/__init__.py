"""Celery workers and tasks.

Tasks are registered by ``jw_preload.core.celery``, which imports each
worker module explicitly.
"""

__all__ = [
    "handle_media_event",
    "preload_media",
    "prune_orphaned_metadata",
]


def __getattr__(name: str):
    """Lazy task lookup so importing the package does not build the Celery app."""
    if name == "preload_media":
        from jw_preload.workers.preload import preload_media
        return preload_media
    if name == "handle_media_event":
        from jw_preload.workers.webhooks import handle_media_event
        return handle_media_event
    if name == "prune_orphaned_metadata":
        from jw_preload.workers.preload_gc import prune_orphaned_metadata
        return prune_orphaned_metadata
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
