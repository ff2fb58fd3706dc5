"""
Create the default sales, production and install roster.
"""
import logging
from django.core.management.base import BaseCommand

from staff.utils import seed_default_staff

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Seed the default staff roster (existing members are left untouched)"

    def handle(self, *args, **options):
        created = seed_default_staff()
        if created:
            logger.info("Seeded staff: %s", ", ".join(created))
            self.stdout.write(self.style.SUCCESS(f"Created {len(created)} staff member(s): {', '.join(created)}"))
        else:
            self.stdout.write(self.style.SUCCESS("Staff already seeded."))
