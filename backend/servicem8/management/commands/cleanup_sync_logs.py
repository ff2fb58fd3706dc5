"""
Cleanup old ServiceM8 sync logs.
"""
from django.core.management.base import BaseCommand
from django.conf import settings

from servicem8.tasks import cleanup_sync_logs_task


class Command(BaseCommand):
    help = "Delete SyncLog records older than the retention window."

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Retention days (default settings.SERVICEM8_LOG_RETENTION_DAYS or 30).",
        )

    def handle(self, *args, **options):
        days = options.get("days")
        if days is None:
            days = getattr(settings, "SERVICEM8_LOG_RETENTION_DAYS", 30)
        count = cleanup_sync_logs_task(days)
        self.stdout.write(self.style.SUCCESS(f"Deleted {count} sync log records older than {days} days."))
