"""Registry of host callbacks that report which media IDs appear on a path."""

import logging
from collections.abc import Callable, Iterable
from typing import Any

logger = logging.getLogger(__name__)

# (path, entity, entity_type, entity_id) -> media IDs found on that path
DiscoveryCallback = Callable[[str, Any, str | None, int | None], Iterable[str]]


def unique_media_ids(media_ids: Iterable[str]) -> list[str]:
    """De-duplicate media IDs keeping first-seen order, dropping blanks."""
    seen: set[str] = set()
    result: list[str] = []
    for media_id in media_ids:
        if not media_id or media_id in seen:
            continue
        seen.add(media_id)
        result.append(media_id)
    return result


class DiscoveryRegistry:
    """Ordered set of discovery callbacks whose results are unioned."""

    def __init__(self, callbacks: Iterable[DiscoveryCallback] = ()):
        self._callbacks: list[DiscoveryCallback] = list(callbacks)

    def register(self, callback: DiscoveryCallback) -> DiscoveryCallback:
        """Add a callback. Usable as a decorator."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)
        return callback

    def unregister(self, callback: DiscoveryCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def __len__(self) -> int:
        return len(self._callbacks)

    def discover(
        self,
        path: str,
        entity: Any = None,
        entity_type: str | None = None,
        entity_id: int | None = None,
    ) -> list[str]:
        """Media IDs every callback reports for ``path``, in registration order.

        A callback that raises contributes nothing; the error is logged.
        """
        found: list[str] = []
        for callback in self._callbacks:
            name = getattr(callback, "__qualname__", repr(callback))
            try:
                found.extend(callback(path, entity, entity_type, entity_id) or ())
            except Exception as e:
                logger.error(f"Discovery callback {name} failed for {path}: {e}")
        return unique_media_ids(found)


# Process-wide registry the host registers its callbacks on
default_registry = DiscoveryRegistry()
