"""Test doubles shared by the test modules."""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from jw_preload.models import Base, MediaRelation, Metadata
from jw_preload.services.metadata_client import MetadataFetchError

BASE_TIME = 1_700_000_000


@contextmanager
def sqlite_session() -> Generator[Session, None, None]:
    """Fresh in-memory database with the preload tables."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    session = Session(engine, expire_on_commit=False, autoflush=False)
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


class FakeClock:
    """Callable returning a controllable unix timestamp."""

    def __init__(self, now: int = BASE_TIME):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int = 1) -> int:
        self.now += seconds
        return self.now


class FakeRedis:
    """Just enough of redis.Redis for pending markers and pub/sub."""

    def __init__(self):
        self.data: dict[str, Any] = {}
        self.published: list[tuple[str, str]] = []

    def set(self, key: str, value: Any, nx: bool = False, ex: int | None = None) -> bool | None:
        if nx and key in self.data:
            return None
        self.data[key] = value
        return True

    def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self.data.pop(key, None) is not None)

    def publish(self, channel: str, message: str) -> int:
        self.published.append((channel, message))
        return 1


class RecordingTask:
    """Stands in for a Celery task; records what would be sent to the broker."""

    def __init__(self):
        self.sent: list[dict[str, Any]] = []

    def apply_async(self, args: Any = None, kwargs: Any = None, **options: Any) -> None:
        self.sent.append({"kwargs": kwargs, **options})

    @property
    def media_ids(self) -> list[str]:
        return [call["kwargs"]["media_id"] for call in self.sent]


class StubMetadataClient:
    """Returns canned bodies (or raises canned errors) per media ID."""

    def __init__(self, responses: dict[str, Any] | None = None):
        self.responses = responses or {}
        self.calls: list[str] = []

    def fetch(self, media_id: str) -> str:
        self.calls.append(media_id)
        response = self.responses.get(media_id, f'{{"title": "{media_id}"}}')
        if isinstance(response, MetadataFetchError):
            raise response
        return response


class RecordingNotifier:
    """Collects invalidation requests."""

    def __init__(self):
        self.calls: list[list[str]] = []

    def invalidate(self, paths) -> None:
        paths = list(paths)
        if paths:
            self.calls.append(paths)


def relation_pairs(db: Session) -> set[tuple[str, str]]:
    """Every stored (media_id, path) pair."""
    rows = db.execute(select(MediaRelation.media_id, MediaRelation.path)).all()
    return {(media_id, path) for media_id, path in rows}


def metadata_ids(db: Session) -> set[str]:
    return set(db.execute(select(Metadata.media_id)).scalars().all())
