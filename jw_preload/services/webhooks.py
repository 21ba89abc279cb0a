"""Media webhook event handling."""

import logging

from jw_preload.schemas.webhook import DELETE_EVENTS, REFRESH_EVENTS, WebhookEvent
from jw_preload.services.preload import PreloadOutcome, PreloadWorker

logger = logging.getLogger(__name__)


class WebhookEventHandler:
    """Routes media service events to a refresh or a delete.

    Refresh events skip the freshness check: the event itself says the
    metadata changed.
    """

    def __init__(self, worker: PreloadWorker):
        self.worker = worker

    def handle(self, event: WebhookEvent) -> PreloadOutcome | None:
        """Act on ``event``. Returns None for ignored event kinds."""
        kind = event.kind

        if kind in REFRESH_EVENTS:
            logger.info(f"Received {event.event} for {event.media_id}, refreshing metadata")
            return self.worker.refresh(event.media_id)

        if kind in DELETE_EVENTS:
            logger.info(f"Received {event.event} for {event.media_id}, dropping metadata")
            return self.worker.drop(event.media_id)

        logger.info(f"Ignoring unhandled event type: {event.event}")
        return None
