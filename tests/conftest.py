"""Shared pytest fixtures."""

import pytest

from jw_preload.services.discovery import DiscoveryRegistry
from jw_preload.services.preload import PreloadWorker
from jw_preload.services.preload_queue import PreloadQueue
from jw_preload.services.reconciler import RelationReconciler
from support import (
    FakeClock,
    FakeRedis,
    RecordingNotifier,
    RecordingTask,
    StubMetadataClient,
    sqlite_session,
)


@pytest.fixture
def db():
    """Session on an empty in-memory database."""
    with sqlite_session() as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def task():
    return RecordingTask()


@pytest.fixture
def queue(fake_redis, task):
    return PreloadQueue(redis_client=fake_redis, task=task, queue_name="preload", pending_ttl=600)


@pytest.fixture
def registry():
    return DiscoveryRegistry()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client():
    return StubMetadataClient()


@pytest.fixture
def reconciler(db, queue, registry, clock):
    return RelationReconciler(db, queue, registry=registry, clock=clock)


@pytest.fixture
def worker(db, client, notifier, queue, clock):
    return PreloadWorker(db, client=client, notifier=notifier, queue=queue, clock=clock)
