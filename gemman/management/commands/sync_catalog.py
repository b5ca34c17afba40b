"""
Management command to run one catalog sync.

Usage:
    python manage.py sync_catalog
"""

from django.core.management.base import BaseCommand, CommandError

from gemman import catalog
from gemman.models import SyncTrigger


class Command(BaseCommand):
    """Run one catalog sync synchronously."""

    help = 'Sincroniza o catálogo com o fornecedor'

    def handle(self, *args, **options):
        result = catalog.run_sync(trigger=SyncTrigger.COMMAND)

        if result['status'] != 'success':
            raise CommandError(f"[{result['code']}] {result['error']}")

        self.stdout.write(
            self.style.SUCCESS(f"{result['processed_count']} pedra(s) sincronizada(s)")
        )
