"""Metadata cache garbage collection worker.

Relations and metadata are normally pruned together, but rows can still be
orphaned by writes that bypass this package (manual SQL, host-side bulk
deletes). This sweep removes them.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from jw_preload.core.celery import celery_app
from jw_preload.core.database import get_sync_session
from jw_preload.services.metadata_store import MetadataStore

logger = logging.getLogger(__name__)


def cleanup_orphaned_metadata(db: Session) -> dict:
    """Delete metadata rows no relation references.

    Args:
        db: Database session

    Returns:
        Dict with cleanup statistics
    """
    store = MetadataStore(db)

    orphaned = store.orphaned_media_ids()
    if not orphaned:
        logger.debug("No orphaned metadata to clean up")
        return {"metadata_deleted": 0}

    deleted = store.prune_all()
    db.commit()

    logger.info(f"Pruned {deleted} orphaned metadata rows")
    return {"metadata_deleted": deleted}


@celery_app.task(
    bind=True,
    name="jw_preload.workers.preload_gc.prune_orphaned_metadata",
)
def prune_orphaned_metadata(self) -> dict:
    """
    Periodic sweep of the metadata cache, scheduled by Celery Beat.

    Returns:
        Dict with cleanup statistics
    """
    logger.info("Starting metadata cache garbage collection")

    results = {
        "timestamp": datetime.now(UTC).isoformat(),
        "status": "completed",
    }

    try:
        with get_sync_session() as db:
            results.update(cleanup_orphaned_metadata(db))
    except Exception as e:
        logger.error(f"Metadata cache GC failed: {e}")
        results["status"] = "failed"
        results["error"] = str(e)
        raise

    return results
