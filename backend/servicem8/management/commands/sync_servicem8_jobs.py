"""
Django management command to pull jobs from ServiceM8.
"""
import logging
from django.core.management.base import BaseCommand
from servicem8.models import SyncLog
from servicem8.sync_engine import run_servicem8_sync

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Sync active ServiceM8 jobs into the local jobs table"

    def add_arguments(self, parser):
        parser.add_argument(
            "--sync-type",
            type=str,
            default=SyncLog.TYPE_FULL,
            choices=[choice for choice, _ in SyncLog.SYNC_TYPE_CHOICES],
            help="Sync type recorded on the sync log (default full)",
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("Starting ServiceM8 sync..."))
        try:
            stats = run_servicem8_sync(sync_type=options["sync_type"], trigger=SyncLog.TRIGGER_MANUAL)
        except Exception as e:
            logger.error(f"ServiceM8 sync failed: {e}", exc_info=True)
            self.stdout.write(self.style.ERROR(f"ServiceM8 sync failed: {e}"))
            raise
        style = self.style.WARNING if stats["status"] == SyncLog.STATUS_PARTIAL else self.style.SUCCESS
        self.stdout.write(style(
            f"ServiceM8 sync {stats['status']}: {stats['jobs_processed']} processed "
            f"({stats['created']} created, {stats['updated']} updated, {stats['failed']} failed)."
        ))
