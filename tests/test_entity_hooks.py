"""Tests for entity lifecycle hooks."""

import pytest

from jw_preload.services.entity_hooks import EntityLifecycleHooks
from jw_preload.services.metadata_store import MetadataStore
from support import BASE_TIME, metadata_ids, relation_pairs


@pytest.fixture
def hooks(reconciler, notifier):
    return EntityLifecycleHooks(reconciler, notifier)


class TestEntityDelete:

    def test_removes_owned_relations_and_prunes(self, db, reconciler, hooks):
        reconciler.reconcile("/node/1", ["m1", "m2"], entity_type="node", entity_id=1)
        reconciler.reconcile("/node/2", ["m2"], entity_type="node", entity_id=2)
        store = MetadataStore(db)
        store.upsert("m1", "{}", now=BASE_TIME)
        store.upsert("m2", "{}", now=BASE_TIME)
        db.commit()

        removed = hooks.on_entity_delete("node", 1)

        assert removed == 2
        assert relation_pairs(db) == {("m2", "/node/2")}
        assert metadata_ids(db) == {"m2"}

    def test_string_entity_id_is_accepted(self, db, reconciler, hooks):
        reconciler.reconcile("/node/3", ["m1"], entity_type="node", entity_id=3)

        assert hooks.on_entity_delete("node", "3") == 1
        assert relation_pairs(db) == set()

    @pytest.mark.parametrize(
        "entity_type,entity_id",
        [(None, 1), ("", 1), ("node", None), ("node", "abc"), ("node", 0)],
    )
    def test_unresolvable_entity_is_logged_and_skipped(self, db, reconciler, hooks, caplog, entity_type, entity_id):
        reconciler.reconcile("/node/1", ["m1"], entity_type="node", entity_id=1)

        assert hooks.on_entity_delete(entity_type, entity_id) == 0
        assert relation_pairs(db) == {("m1", "/node/1")}
        assert "Skipping media relation cleanup" in caplog.text

    def test_entity_without_relations(self, hooks):
        assert hooks.on_entity_delete("node", 99) == 0


class TestEntitySave:

    def test_create_reconciles_without_invalidating(self, db, registry, hooks, notifier, task):
        registry.register(lambda path, entity, etype, eid: ["m1"])

        hooks.on_entity_save("/node/4", entity={"nid": 4}, entity_type="node", entity_id=4)

        assert relation_pairs(db) == {("m1", "/node/4")}
        assert task.media_ids == ["m1"]
        assert notifier.calls == []

    def test_update_invalidates_path(self, db, registry, hooks, notifier):
        registry.register(lambda path, entity, etype, eid: ["m1"])

        hooks.on_entity_save("/node/4", entity_type="node", entity_id=4, is_update=True)

        assert notifier.calls == [["/node/4"]]
