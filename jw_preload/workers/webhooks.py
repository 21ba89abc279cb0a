"""Webhook event tasks.

The host's webhook endpoint parses the delivery and hands the payload to
``handle_media_event.delay(payload)`` so the request returns immediately.
"""

import logging

from pydantic import ValidationError

from jw_preload.core.celery import celery_app
from jw_preload.core.database import get_sync_session
from jw_preload.schemas.webhook import WebhookEvent
from jw_preload.services.webhooks import WebhookEventHandler
from jw_preload.workers.helpers import build_preload_worker

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    name="jw_preload.workers.webhooks.handle_media_event",
    acks_late=True,
    reject_on_worker_lost=True,
)
def handle_media_event(self, payload: dict) -> dict:
    """
    Apply one media webhook event.

    Args:
        payload: ``{"event": ..., "media_id": ...}`` as delivered by the host

    Returns:
        dict with event status
    """
    try:
        event = WebhookEvent.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Ignoring malformed webhook payload: {e.error_count()} errors")
        return {"status": "ignored", "reason": "invalid payload"}

    with get_sync_session() as db:
        outcome = WebhookEventHandler(build_preload_worker(db)).handle(event)

    if outcome is None:
        return {"status": "ignored", "event": event.event}

    return {
        "status": outcome.value,
        "event": event.event,
        "media_id": event.media_id,
    }
