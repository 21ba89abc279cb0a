"""Hooks the host calls when content entities are saved or deleted."""

import logging
from typing import Any

from jw_preload.models.metadata import Metadata
from jw_preload.services.invalidation import InvalidationNotifier
from jw_preload.services.reconciler import RelationReconciler

logger = logging.getLogger(__name__)


class EntityIdResolutionFailed(Exception):
    """The entity does not carry a usable type and ID."""

    def __init__(self, entity_type: Any, entity_id: Any):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            f"Cannot resolve entity identifiers (type={entity_type!r}, id={entity_id!r})"
        )


def _resolve_entity(entity_type: Any, entity_id: Any) -> tuple[str, int]:
    if not entity_type or not isinstance(entity_type, str):
        raise EntityIdResolutionFailed(entity_type, entity_id)
    try:
        resolved_id = int(entity_id)
    except (TypeError, ValueError) as e:
        raise EntityIdResolutionFailed(entity_type, entity_id) from e
    if resolved_id <= 0:
        raise EntityIdResolutionFailed(entity_type, entity_id)
    return entity_type, resolved_id


class EntityLifecycleHooks:
    """Keeps relations in step with the host's content entities."""

    def __init__(self, reconciler: RelationReconciler, notifier: InvalidationNotifier):
        self.reconciler = reconciler
        self.notifier = notifier

    def on_entity_delete(self, entity_type: str | None, entity_id: int | str | None) -> int:
        """Remove the relations a deleted entity owned.

        Returns:
            Number of relations removed (0 when the entity could not be
            identified).
        """
        try:
            entity_type, entity_id = _resolve_entity(entity_type, entity_id)
        except EntityIdResolutionFailed as e:
            logger.error(f"Skipping media relation cleanup: {e}")
            return 0

        relations = self.reconciler.relations
        owned = relations.relations_by_entity(entity_type, entity_id)
        if not owned:
            return 0

        media_ids = {relation.media_id for relation in owned}
        removed = relations.delete_relations_by_entity(entity_type, entity_id)
        pruned = self.reconciler.metadata.prune(media_ids)
        self.reconciler.db.commit()

        logger.info(
            f"Deleted {entity_type} {entity_id}: removed {removed} media relations, "
            f"pruned {pruned} metadata rows"
        )
        return removed

    def on_entity_save(
        self,
        path: str,
        entity: Any = None,
        entity_type: str | None = None,
        entity_id: int | None = None,
        is_update: bool = False,
    ) -> dict[str, Metadata]:
        """Reconcile the entity's path after it was created or updated."""
        cached = self.reconciler.reconcile_path(path, entity, entity_type, entity_id)
        if is_update:
            self.notifier.invalidate([path])
        return cached
