"""Webhook event schemas."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MediaEventKind(str, Enum):
    """Webhook event kinds this subsystem acts on."""

    MEDIA_AVAILABLE = "media_available"
    CONVERSIONS_COMPLETE = "conversions_complete"
    MEDIA_UPDATED = "media_updated"
    MEDIA_REUPLOADED = "media_reuploaded"
    MEDIA_DELETED = "media_deleted"


# Metadata may have changed: fetch it again
REFRESH_EVENTS = frozenset({
    MediaEventKind.MEDIA_AVAILABLE,
    MediaEventKind.CONVERSIONS_COMPLETE,
    MediaEventKind.MEDIA_UPDATED,
})

# Asset gone or not fetchable yet: drop what we have
DELETE_EVENTS = frozenset({
    MediaEventKind.MEDIA_REUPLOADED,
    MediaEventKind.MEDIA_DELETED,
})


class WebhookEvent(BaseModel):
    """A webhook delivery already parsed by the host's transport layer.

    ``event`` is kept as a plain string so unknown kinds validate and can be
    ignored instead of rejected.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    event: str = Field(..., min_length=1)
    media_id: str = Field(..., min_length=1, max_length=64)

    @property
    def kind(self) -> MediaEventKind | None:
        """Recognized event kind, or None."""
        try:
            return MediaEventKind(self.event)
        except ValueError:
            return None
