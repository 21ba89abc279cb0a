"""Celery configuration and app."""

from celery import Celery
from celery.schedules import crontab
from celery.signals import worker_shutdown

from jw_preload.core.config import settings
from jw_preload.core.redis import close_redis_pool

celery_app = Celery(
    "jw_preload",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

# Celery configuration
celery_app.conf.update(
    # Serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    # Timezone
    timezone="UTC",
    enable_utc=True,

    # Task settings
    task_track_started=True,
    task_time_limit=settings.preload_task_time_limit + 30,
    task_soft_time_limit=settings.preload_task_time_limit,

    # Result settings
    result_expires=3600,  # Results expire after 1 hour

    # Worker settings
    worker_prefetch_multiplier=1,  # One task at a time per worker
    worker_concurrency=4,

    # Task routing
    task_routes={
        "jw_preload.workers.preload.*": {"queue": settings.preload_queue_name},
        "jw_preload.workers.webhooks.*": {"queue": settings.preload_queue_name},
        "jw_preload.workers.preload_gc.*": {"queue": "default"},
    },

    # Default queue
    task_default_queue="default",

    # Task acknowledgement: redeliver items a worker died holding
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    # Beat scheduler configuration
    beat_schedule={
        # Prune metadata rows left without relations
        "prune-orphaned-metadata": {
            "task": "jw_preload.workers.preload_gc.prune_orphaned_metadata",
            "schedule": crontab(minute="*/30"),  # Every 30 minutes
            "options": {"queue": "default"},
        },
    },
)


@worker_shutdown.connect
def release_redis_pool(**kwargs):
    """Disconnect the shared Redis pool when a worker process exits."""
    close_redis_pool()


# Explicitly import each worker module to register tasks with Celery.
import jw_preload.workers.preload  # noqa: F401, E402
import jw_preload.workers.preload_gc  # noqa: F401, E402
import jw_preload.workers.webhooks  # noqa: F401, E402
