"""Relation tracking, metadata cache and preload services."""

from jw_preload.services.discovery import DiscoveryRegistry, default_registry
from jw_preload.services.entity_hooks import EntityIdResolutionFailed, EntityLifecycleHooks
from jw_preload.services.invalidation import (
    CallbackInvalidationNotifier,
    InvalidationNotifier,
    RedisInvalidationNotifier,
    default_callback_notifier,
    get_invalidation_notifier,
)
from jw_preload.services.metadata_client import (
    DecodeFailed,
    DownloadFailed,
    MetadataClient,
    MetadataFetchError,
)
from jw_preload.services.metadata_store import MetadataStore
from jw_preload.services.preload import PreloadOutcome, PreloadWorker
from jw_preload.services.preload_queue import PreloadQueue, PreloadQueueItem
from jw_preload.services.reconciler import RelationReconciler
from jw_preload.services.relation_store import RelationStore, StoreWriteFailed
from jw_preload.services.webhooks import WebhookEventHandler

__all__ = [
    "CallbackInvalidationNotifier",
    "DecodeFailed",
    "DiscoveryRegistry",
    "DownloadFailed",
    "EntityIdResolutionFailed",
    "EntityLifecycleHooks",
    "InvalidationNotifier",
    "MetadataClient",
    "MetadataFetchError",
    "MetadataStore",
    "PreloadOutcome",
    "PreloadQueue",
    "PreloadQueueItem",
    "PreloadWorker",
    "RedisInvalidationNotifier",
    "RelationReconciler",
    "RelationStore",
    "StoreWriteFailed",
    "WebhookEventHandler",
    "default_callback_notifier",
    "default_registry",
    "get_invalidation_notifier",
]
