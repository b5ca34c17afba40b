"""
Unit queries — read-only operations.

All methods are classmethods and use no locking.
"""

import math
from typing import Iterable

from gemman.conf import gemman_settings
from gemman.exceptions import ValidationError
from gemman.models.enums import UnitStatus
from gemman.models.sync_run import SyncRun
from gemman.models.unit import InventoryUnit
from gemman.services.canonical import to_decimal

SORTABLE_FIELDS = frozenset({
    'created_at',
    'updated_at',
    'stock_id',
    'size',
    'color',
    'clarity',
    'shape',
    'price_per_carat',
    'final_amount',
    'status',
})


def _as_list(values) -> list[str]:
    """Accept an iterable or a comma separated string."""
    if values is None:
        return []
    if isinstance(values, str):
        values = values.split(',')
    return [str(v).strip() for v in values if str(v).strip()]


def _as_int(value, name: str, default: int) -> int:
    if value is None or value == '':
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError('INVALID_PAGINATION', field=name, value=str(value)) from None


class UnitQueries:
    """Read-only unit query methods."""

    @classmethod
    def search(
        cls,
        search: str | None = None,
        status: str | None = None,
        carat=None,
        colors: Iterable[str] | str | None = None,
        clarities: Iterable[str] | str | None = None,
        shapes: Iterable[str] | str | None = None,
        sort_by: str | None = None,
        sort_order: str = 'desc',
        take=None,
        skip=None,
        ids: Iterable | str | None = None,
    ) -> dict:
        """
        List units with filters, sorting and pagination.

        Args:
            search: Case-insensitive match on stock id, certificate,
                shape, color, clarity and lab
            status: Exact lifecycle status
            carat: Exact weight
            colors, clarities, shapes: Set membership (list or "a,b")
            sort_by: One of SORTABLE_FIELDS (None = created_at)
            sort_order: "asc" or "desc"
            take: Page size, 1..MAX_PAGE_SIZE
            skip: Offset, >= 0
            ids: Restrict to these primary keys

        Returns:
            {"items": [InventoryUnit, ...], "total": int, "pages": int}

        Raises:
            ValidationError('INVALID_STATUS' | 'INVALID_VALUE' |
                'INVALID_SORT' | 'INVALID_PAGINATION')
        """
        qs = InventoryUnit.objects.all()

        if search and search.strip():
            qs = qs.matching(search.strip())

        if status:
            normalized = status.strip().lower()
            if normalized not in UnitStatus.values:
                raise ValidationError('INVALID_STATUS', status=status, expected=list(UnitStatus.values))
            qs = qs.filter(status=normalized)

        if carat not in (None, ''):
            weight = to_decimal(carat, 3)
            if weight is None:
                raise ValidationError('INVALID_VALUE', field='carat', value=str(carat))
            qs = qs.filter(size=weight)

        for field, values in (('color', colors), ('clarity', clarities), ('shape', shapes)):
            values = _as_list(values)
            if values:
                qs = qs.filter(**{f'{field}__in': values})

        pks = _as_list(ids)
        if pks:
            try:
                qs = qs.filter(pk__in=[int(pk) for pk in pks])
            except ValueError:
                raise ValidationError('INVALID_VALUE', field='ids', value=','.join(pks)) from None

        qs = qs.order_by(cls._ordering(sort_by, sort_order), '-pk')

        max_size = gemman_settings.MAX_PAGE_SIZE
        take = _as_int(take, 'take', gemman_settings.DEFAULT_PAGE_SIZE)
        skip = _as_int(skip, 'skip', 0)
        if not 1 <= take <= max_size:
            raise ValidationError('INVALID_PAGINATION', field='take', value=take, max=max_size)
        if skip < 0:
            raise ValidationError('INVALID_PAGINATION', field='skip', value=skip)

        total = qs.count()
        return {
            'items': list(qs[skip:skip + take]),
            'total': total,
            'pages': math.ceil(total / take),
        }

    @classmethod
    def sync_status(cls) -> dict:
        """
        Latest sync run and current catalog size.

        Returns:
            {"latest_sync": SyncRun | None, "total_units": int}
        """
        return {
            'latest_sync': SyncRun.objects.latest_run(),
            'total_units': InventoryUnit.objects.count(),
        }

    @staticmethod
    def _ordering(sort_by: str | None, sort_order: str | None) -> str:
        field = sort_by or 'created_at'
        if field not in SORTABLE_FIELDS:
            raise ValidationError('INVALID_SORT', sort_by=field, allowed=sorted(SORTABLE_FIELDS))
        order = (sort_order or 'desc').lower()
        if order not in ('asc', 'desc'):
            raise ValidationError('INVALID_SORT', sort_order=sort_order)
        return field if order == 'asc' else f'-{field}'

