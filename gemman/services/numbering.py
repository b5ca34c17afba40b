"""
Document numbers — date-scoped sequence numbers for invoices and memos.

Format: <PREFIX>-<NNN>A/<DDMM>, e.g. CD-103A/0504 or CDM-005A/0504.
The sequence restarts every day at the series start value.

issue() must run inside the transaction that inserts the document:

    with transaction.atomic():
        number = catalog.issue_number('invoice')
        Invoice.objects.create(invoice_no=number, ...)

The counter row is locked until that transaction ends, so two
concurrent documents never get the same number, and a rollback gives
the number back.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from gemman.conf import gemman_settings
from gemman.exceptions import ValidationError
from gemman.models.sequence import DocumentSequence

logger = logging.getLogger('gemman')

NUMBER_PATTERN = re.compile(r'^(?P<prefix>[A-Z0-9]+)-(?P<sequence>\d+)A/(?P<ddmm>\d{4})$')
MAX_SEQUENCE = 999


@dataclass(frozen=True)
class Series:
    """Numbering series of one document type."""

    document_type: str
    prefix: str
    start: int


@dataclass(frozen=True)
class ParsedNumber:
    prefix: str
    sequence: int
    ddmm: str


def get_series(document_type: str) -> Series:
    """
    Series configured for a document type.

    Raises:
        ValidationError('UNKNOWN_DOCUMENT_TYPE')
    """
    key = (document_type or '').strip().lower()
    config = gemman_settings.DOCUMENT_SERIES.get(key)
    if not config:
        raise ValidationError(
            'UNKNOWN_DOCUMENT_TYPE',
            document_type=document_type,
            expected=sorted(gemman_settings.DOCUMENT_SERIES),
        )
    return Series(document_type=key, prefix=config['prefix'], start=int(config['start']))


def date_suffix(on: date) -> str:
    """DDMM part of a number."""
    return on.strftime('%d%m')


def parse_number(number: str | None) -> ParsedNumber | None:
    """Split a document number, or None if it does not match the format."""
    if not number:
        return None
    match = NUMBER_PATTERN.match(number.strip())
    if not match:
        return None
    return ParsedNumber(
        prefix=match['prefix'],
        sequence=int(match['sequence']),
        ddmm=match['ddmm'],
    )


def format_number(series: Series, sequence: int, on: date) -> str:
    """
    Render a document number.

    Raises:
        ValidationError('SEQUENCE_EXHAUSTED'): sequence does not fit 3 digits
    """
    if sequence > MAX_SEQUENCE:
        raise ValidationError(
            'SEQUENCE_EXHAUSTED',
            document_type=series.document_type,
            date=on.isoformat(),
        )
    return f'{series.prefix}-{sequence:03d}A/{date_suffix(on)}'


def _following(series: Series, last_issued: str | None, on: date) -> int:
    parsed = parse_number(last_issued)
    if parsed and parsed.prefix == series.prefix and parsed.ddmm == date_suffix(on):
        return parsed.sequence + 1
    return series.start


class DocumentNumbers:
    """Document numbering methods."""

    @classmethod
    def parse(cls, number: str | None) -> ParsedNumber | None:
        """(prefix, sequence, ddmm) of a number, or None."""
        return parse_number(number)

    @classmethod
    def next_number(cls, document_type: str, last_issued: str | None, on: date | None = None) -> str:
        """
        Number following last_issued, without touching the database.

        Same series and same DDMM → sequence + 1. Anything else (no
        previous number, unparseable, other day) → series start.
        """
        series = get_series(document_type)
        on = on or timezone.localdate()
        return format_number(series, _following(series, last_issued, on), on)

    @classmethod
    def issue(cls, document_type: str, on: date | None = None, last_issued: str | None = None) -> str:
        """
        Allocate the next number for a document type.

        Args:
            document_type: Key of GEMMAN['DOCUMENT_SERIES']
            on: Document date (None = today)
            last_issued: Latest number already persisted by the caller.
                Only used to seed the counter on its first use of the
                day, so numbering continues after pre-existing documents.

        Returns:
            Formatted number

        Raises:
            ValidationError('UNKNOWN_DOCUMENT_TYPE' | 'SEQUENCE_EXHAUSTED')

        Concurrency:
            - Runs under transaction.atomic() (savepoint when nested)
            - Counter row locked with select_for_update()
            - Concurrent first use of a day resolved by the unique
              constraint + savepoint retry
        """
        series = get_series(document_type)
        on = on or timezone.localdate()
        counters = DocumentSequence.objects.filter(document_type=series.document_type, bucket=on)

        with transaction.atomic():
            if not counters.select_for_update().exists():
                first = _following(series, last_issued, on)
                try:
                    with transaction.atomic():
                        DocumentSequence.objects.create(
                            document_type=series.document_type,
                            bucket=on,
                            last_value=first,
                        )
                    return cls._issued(series, first, on)
                except IntegrityError:
                    # Another transaction opened the day first
                    logger.debug(
                        "gemman.document.counter_race",
                        extra={"document_type": series.document_type},
                    )

            counters.update(last_value=F('last_value') + 1, updated_at=timezone.now())
            value = counters.select_for_update().values_list('last_value', flat=True).get()
            return cls._issued(series, value, on)

    @classmethod
    def peek(cls, document_type: str, on: date | None = None, last_issued: str | None = None) -> str:
        """Number issue() would return next. Consumes nothing."""
        series = get_series(document_type)
        on = on or timezone.localdate()
        current = (
            DocumentSequence.objects
            .filter(document_type=series.document_type, bucket=on)
            .values_list('last_value', flat=True)
            .first()
        )
        if current is None:
            return format_number(series, _following(series, last_issued, on), on)
        return format_number(series, current + 1, on)

    @staticmethod
    def _issued(series: Series, value: int, on: date) -> str:
        number = format_number(series, value, on)
        logger.info(
            "gemman.document.number_issued",
            extra={"document_type": series.document_type, "number": number},
        )
        return number
