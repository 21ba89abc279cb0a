"""Pydantic schemas."""

from jw_preload.schemas.webhook import (
    DELETE_EVENTS,
    REFRESH_EVENTS,
    MediaEventKind,
    WebhookEvent,
)

__all__ = [
    "DELETE_EVENTS",
    "REFRESH_EVENTS",
    "MediaEventKind",
    "WebhookEvent",
]
