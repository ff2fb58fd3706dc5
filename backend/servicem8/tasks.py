"""
Celery tasks for the ServiceM8 integration.
"""
import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from servicem8.models import SyncLog
from servicem8.sync_engine import run_servicem8_sync

logger = logging.getLogger(__name__)


@shared_task
def sync_servicem8_jobs_task():
    """
    Periodic task to pull jobs from ServiceM8.
    """
    try:
        logger.info("Starting automatic ServiceM8 sync...")
        stats = run_servicem8_sync(trigger=SyncLog.TRIGGER_AUTOMATIC)
        logger.info("Automatic ServiceM8 sync completed: %s jobs", stats.get("jobs_processed"))
        return stats
    except Exception as e:
        logger.error(f"Error in automatic ServiceM8 sync: {e}", exc_info=True)
        raise


@shared_task
def sync_servicem8_jobs_manual_task(sync_type=SyncLog.TYPE_FULL):
    try:
        logger.info("Starting manual ServiceM8 sync...")
        return run_servicem8_sync(sync_type=sync_type, trigger=SyncLog.TRIGGER_MANUAL)
    except Exception as e:
        logger.error(f"Error in manual ServiceM8 sync: {e}", exc_info=True)
        raise


@shared_task
def cleanup_sync_logs_task(days=None):
    """Delete sync logs older than SERVICEM8_LOG_RETENTION_DAYS."""
    if days is None:
        days = getattr(settings, "SERVICEM8_LOG_RETENTION_DAYS", 30)
    cutoff = timezone.now() - timedelta(days=days)
    deleted, _ = SyncLog.objects.filter(started_at__lt=cutoff).delete()
    logger.info("Deleted %s sync log(s) older than %s days", deleted, days)
    return deleted
