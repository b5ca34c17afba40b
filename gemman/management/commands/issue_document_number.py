"""
Management command to issue (or preview) a document number.

Usage:
    python manage.py issue_document_number invoice
    python manage.py issue_document_number memo --date 2025-04-05
    python manage.py issue_document_number memo --peek
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from gemman import catalog
from gemman.exceptions import ValidationError


class Command(BaseCommand):
    """Issue document number command."""

    help = 'Emite o próximo número de nota ou memorando'

    def add_arguments(self, parser):
        parser.add_argument('document_type', help='Tipo de documento (ex: invoice, memo)')
        parser.add_argument('--date', help='Data do documento (AAAA-MM-DD, padrão: hoje)')
        parser.add_argument(
            '--peek',
            action='store_true',
            help='Mostra o próximo número sem consumi-lo'
        )

    def handle(self, *args, **options):
        on = None
        if options['date']:
            try:
                on = date.fromisoformat(options['date'])
            except ValueError:
                raise CommandError(f"Data inválida: {options['date']}") from None

        try:
            if options['peek']:
                number = catalog.peek(options['document_type'], on=on)
            else:
                number = catalog.issue(options['document_type'], on=on)
        except ValidationError as e:
            raise CommandError(f'[{e.code}] {e.message}') from e

        self.stdout.write(number)
