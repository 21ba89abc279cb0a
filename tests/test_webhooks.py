"""Tests for webhook event handling."""

import pytest
from pydantic import ValidationError

from jw_preload.schemas.webhook import MediaEventKind, WebhookEvent
from jw_preload.services.metadata_store import MetadataStore
from jw_preload.services.preload import PreloadOutcome
from jw_preload.services.relation_store import RelationStore
from jw_preload.services.webhooks import WebhookEventHandler
from support import BASE_TIME, metadata_ids


@pytest.fixture
def handler(worker):
    return WebhookEventHandler(worker)


@pytest.fixture
def related(db):
    store = RelationStore(db)
    store.add_relation("m1", "/a")
    store.add_relation("m1", "/b")
    return store


class TestWebhookEvent:

    def test_known_kind(self):
        event = WebhookEvent(event="media_deleted", media_id="m1")
        assert event.kind is MediaEventKind.MEDIA_DELETED

    def test_unknown_kind_validates(self):
        event = WebhookEvent.model_validate({"event": "track_added", "media_id": "m1"})
        assert event.kind is None

    @pytest.mark.parametrize("payload", [{"event": "media_updated"}, {"event": "media_updated", "media_id": "  "}])
    def test_missing_media_id_rejected(self, payload):
        with pytest.raises(ValidationError):
            WebhookEvent.model_validate(payload)


class TestWebhookEventHandler:

    def test_media_deleted_drops_metadata_and_invalidates(self, db, related, handler, client, notifier):
        MetadataStore(db).upsert("m1", "{}", now=BASE_TIME)
        db.commit()

        outcome = handler.handle(WebhookEvent(event="media_deleted", media_id="m1"))

        assert outcome is PreloadOutcome.DELETED
        assert metadata_ids(db) == set()
        assert notifier.calls == [["/a", "/b"]]
        assert client.calls == []

    def test_media_reuploaded_does_not_fetch(self, db, related, handler, client):
        handler.handle(WebhookEvent(event="media_reuploaded", media_id="m1"))
        assert client.calls == []

    @pytest.mark.parametrize("kind", ["media_available", "conversions_complete", "media_updated"])
    def test_refresh_events_fetch_even_when_fresh(self, db, related, handler, client, notifier, clock, kind):
        MetadataStore(db).upsert("m1", '{"old": true}', now=clock() + 60)
        db.commit()
        client.responses["m1"] = '{"old": false}'

        outcome = handler.handle(WebhookEvent(event=kind, media_id="m1"))

        assert outcome is PreloadOutcome.REFRESHED
        assert client.calls == ["m1"]
        assert MetadataStore(db).get("m1").document() == {"old": False}
        assert notifier.calls == [["/a", "/b"]]

    def test_unknown_event_is_ignored(self, db, related, handler, client, notifier):
        assert handler.handle(WebhookEvent(event="channel_updated", media_id="m1")) is None
        assert client.calls == []
        assert notifier.calls == []
