"""Database configuration and session management."""

from collections.abc import Generator
from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from jw_preload.core.config import settings


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


@lru_cache
def get_engine() -> Engine:
    """Build the shared engine on first use.

    Both the host request cycle and the Celery workers use sync sessions.
    """
    return create_engine(
        settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


@lru_cache
def get_session_maker() -> sessionmaker[Session]:
    """Session factory bound to the shared engine."""
    return sessionmaker(
        get_engine(),
        class_=Session,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@contextmanager
def get_sync_session() -> Generator[Session, None, None]:
    """Context manager for getting a database session."""
    session = get_session_maker()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
