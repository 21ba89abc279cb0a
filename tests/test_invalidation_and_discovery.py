"""Tests for invalidation notifiers and the discovery registry."""

import json
from unittest.mock import MagicMock, patch

import redis

from jw_preload.services.discovery import DiscoveryRegistry, unique_media_ids
from jw_preload.services.invalidation import (
    CallbackInvalidationNotifier,
    RedisInvalidationNotifier,
    default_callback_notifier,
    get_invalidation_notifier,
)
from support import FakeRedis


class TestCallbackInvalidationNotifier:

    def test_callbacks_receive_deduplicated_paths(self):
        received = []
        notifier = CallbackInvalidationNotifier([received.append])

        notifier.invalidate(["/a", "/b", "/a", ""])

        assert received == [["/a", "/b"]]

    def test_empty_path_list_does_not_call(self):
        callback = MagicMock()
        CallbackInvalidationNotifier([callback]).invalidate([])
        callback.assert_not_called()

    def test_failing_callback_does_not_stop_others(self, caplog):
        received = []

        def broken(paths):
            raise RuntimeError("cache backend down")

        notifier = CallbackInvalidationNotifier()
        notifier.register(broken)
        notifier.register(received.append)
        notifier.register(received.append)  # registered once

        notifier.invalidate(["/a"])

        assert received == [["/a"]]
        assert "cache backend down" in caplog.text


class TestRedisInvalidationNotifier:

    def test_publishes_json_paths(self):
        client = FakeRedis()
        RedisInvalidationNotifier(client, channel="pages").invalidate(["/a", "/b"])
        assert client.published == [("pages", json.dumps(["/a", "/b"]))]

    def test_publish_error_is_logged(self, caplog):
        client = MagicMock()
        client.publish.side_effect = redis.ConnectionError("gone")

        RedisInvalidationNotifier(client, channel="pages").invalidate(["/a"])

        assert "Could not publish invalidation" in caplog.text


class TestNotifierSelection:

    def test_callback_backend_is_default(self):
        assert get_invalidation_notifier() is default_callback_notifier

    def test_redis_backend(self):
        with patch("jw_preload.services.invalidation.settings") as mock_settings, \
                patch("jw_preload.core.redis.get_sync_redis", return_value=FakeRedis()):
            mock_settings.invalidation_backend = "redis"
            mock_settings.invalidation_channel = "jw_preload:invalidate"
            notifier = get_invalidation_notifier()

        assert isinstance(notifier, RedisInvalidationNotifier)
        assert notifier.channel == "jw_preload:invalidate"


class TestDiscoveryRegistry:

    def test_results_are_unioned_in_registration_order(self):
        registry = DiscoveryRegistry()
        registry.register(lambda path, entity, etype, eid: ["b", "a"])
        registry.register(lambda path, entity, etype, eid: ["a", "c"])

        assert registry.discover("/x") == ["b", "a", "c"]

    def test_callback_arguments(self):
        callback = MagicMock(return_value=["m1"])
        registry = DiscoveryRegistry([callback])
        entity = object()

        registry.discover("/node/1", entity, "node", 1)

        callback.assert_called_once_with("/node/1", entity, "node", 1)

    def test_failing_callback_contributes_nothing(self, caplog):
        def broken(path, entity, etype, eid):
            raise KeyError("field_video")

        registry = DiscoveryRegistry([broken, lambda *args: ["m1"]])

        assert registry.discover("/x") == ["m1"]
        assert "failed for /x" in caplog.text

    def test_none_result_is_tolerated(self):
        registry = DiscoveryRegistry([lambda *args: None])
        assert registry.discover("/x") == []

    def test_unregister(self):
        registry = DiscoveryRegistry()
        callback = registry.register(lambda *args: ["m1"])
        registry.unregister(callback)
        assert len(registry) == 0

    def test_unique_media_ids(self):
        assert unique_media_ids(["m2", "", "m1", "m2"]) == ["m2", "m1"]
