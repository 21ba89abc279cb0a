"""Rendering-cache invalidation towards the host application."""

import json
import logging
from collections.abc import Callable, Iterable
from typing import Protocol

import redis

from jw_preload.core.config import settings

logger = logging.getLogger(__name__)

InvalidationCallback = Callable[[list[str]], None]


class InvalidationNotifier(Protocol):
    """Asks the host to drop cached renderings of paths."""

    def invalidate(self, paths: Iterable[str]) -> None: ...


def _unique_paths(paths: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(p for p in paths if p))


class CallbackInvalidationNotifier:
    """Calls in-process host callbacks with the list of paths."""

    def __init__(self, callbacks: Iterable[InvalidationCallback] = ()):
        self._callbacks: list[InvalidationCallback] = list(callbacks)

    def register(self, callback: InvalidationCallback) -> InvalidationCallback:
        """Add a callback. Usable as a decorator."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)
        return callback

    def invalidate(self, paths: Iterable[str]) -> None:
        paths = _unique_paths(paths)
        if not paths:
            return
        for callback in self._callbacks:
            try:
                callback(paths)
            except Exception as e:
                name = getattr(callback, "__qualname__", repr(callback))
                logger.error(f"Invalidation callback {name} failed for {len(paths)} paths: {e}")


class RedisInvalidationNotifier:
    """Publishes the paths as a JSON list on a Redis channel.

    Used when workers run in processes separate from the host renderer,
    which subscribes to the channel and clears its own cache.
    """

    def __init__(self, client: redis.Redis, channel: str | None = None):
        self._client = client
        self.channel = channel or settings.invalidation_channel

    def invalidate(self, paths: Iterable[str]) -> None:
        paths = _unique_paths(paths)
        if not paths:
            return
        try:
            self._client.publish(self.channel, json.dumps(paths))
        except redis.RedisError as e:
            logger.error(f"Could not publish invalidation for {len(paths)} paths: {e}")


# Process-wide callback notifier the host registers its cache-clear hook on
default_callback_notifier = CallbackInvalidationNotifier()


def get_invalidation_notifier() -> InvalidationNotifier:
    """Notifier selected by ``settings.invalidation_backend``."""
    if settings.invalidation_backend == "redis":
        from jw_preload.core.redis import get_sync_redis

        return RedisInvalidationNotifier(get_sync_redis())
    return default_callback_notifier
