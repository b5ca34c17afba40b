"""
Management command to run the periodic catalog sync.

Usage:
    python manage.py run_sync_scheduler
    python manage.py run_sync_scheduler --interval 3600 --no-initial

Runs until SIGINT/SIGTERM.
"""

import signal

from django.core.management.base import BaseCommand, CommandError

from gemman.scheduler import SyncScheduler


class Command(BaseCommand):
    """Run sync scheduler command."""

    help = 'Executa a sincronização periódica do catálogo'

    def add_arguments(self, parser):
        parser.add_argument(
            '--interval',
            type=float,
            default=None,
            help='Segundos entre sincronizações (padrão: GEMMAN["SYNC_INTERVAL_SECONDS"])'
        )
        parser.add_argument(
            '--no-initial',
            action='store_true',
            help='Não sincroniza ao iniciar; espera o primeiro intervalo'
        )

    def handle(self, *args, **options):
        try:
            scheduler = SyncScheduler(
                interval_seconds=options['interval'],
                run_on_start=not options['no_initial'],
            )
        except ValueError as e:
            raise CommandError(str(e)) from e

        def shutdown(signum, frame):
            scheduler.stop()

        signal.signal(signal.SIGINT, shutdown)
        signal.signal(signal.SIGTERM, shutdown)

        scheduler.start()
        self.stdout.write(
            self.style.SUCCESS(f'Agendador iniciado (intervalo: {scheduler.interval_seconds:g}s)')
        )
        try:
            scheduler.wait()
        finally:
            scheduler.stop()
        self.stdout.write('Agendador encerrado')
