"""
Unit lifecycle — create, change, transition and delete units.

All mutating methods use transaction.atomic() and lock the unit row
with select_for_update(). Every error is raised before any write.
"""

import logging
from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction

from gemman.exceptions import ConflictError, NotFoundError, ValidationError
from gemman.models.enums import UnitStatus
from gemman.models.unit import InventoryUnit
from gemman.services.canonical import to_decimal

logger = logging.getLogger('gemman')

REQUIRED_FIELDS = (
    'stock_id',
    'shape',
    'size',
    'color',
    'clarity',
    'polish',
    'symmetry',
    'lab',
    'price_per_carat',
    'final_amount',
)

LIFECYCLE_FIELDS = frozenset({'status', 'owning_transaction_id'})

OWNER_MAX_LENGTH = InventoryUnit._meta.get_field('owning_transaction_id').max_length

# Descriptive fields editable through create/update
EDITABLE_FIELDS = frozenset(
    f.name for f in InventoryUnit._meta.concrete_fields
    if f.editable and f.name not in {'id', 'created_at', 'updated_at'}
) - LIFECYCLE_FIELDS


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def resolve_transition(target_status, owning_transaction_id=None) -> tuple[str, str | None]:
    """
    Apply the lifecycle rules to a requested transition.

    - available: owner is cleared, whatever was passed
    - held/memo/sold: owner is required and replaces the current one

    Returns:
        (status, owning_transaction_id) to persist

    Raises:
        ValidationError('INVALID_STATUS'): Unknown target status
        ValidationError('OWNER_REQUIRED'): Reserving status without owner
        ValidationError('INVALID_VALUE'): Owner is not text or is too long
    """
    if isinstance(target_status, str):
        target_status = target_status.strip().lower()
    if target_status not in UnitStatus.values:
        raise ValidationError(
            'INVALID_STATUS',
            status=target_status,
            expected=list(UnitStatus.values),
        )

    if target_status == UnitStatus.AVAILABLE:
        return UnitStatus.AVAILABLE, None

    if _is_blank(owning_transaction_id):
        raise ValidationError('OWNER_REQUIRED', status=target_status)
    if isinstance(owning_transaction_id, bool) or not isinstance(owning_transaction_id, (str, int)):
        raise ValidationError('INVALID_VALUE', field='owning_transaction_id',
                              value=repr(owning_transaction_id)[:100])

    owner = str(owning_transaction_id).strip()
    if len(owner) > OWNER_MAX_LENGTH:
        raise ValidationError('INVALID_VALUE', field='owning_transaction_id', length=len(owner))
    return target_status, owner


def _clean_fields(fields: dict) -> dict:
    """
    Validate field names and values against the model fields.

    Numbers are parsed leniently ("1,234.50") and rounded to the column's
    decimal places. Text columns accept strings only. Every value then
    goes through the model field's own clean() (max_length, max_digits,
    URL format, null/blank).

    Raises:
        ValidationError('UNKNOWN_FIELD' | 'MISSING_FIELD' | 'INVALID_VALUE')
    """
    unknown = sorted(set(fields) - EDITABLE_FIELDS)
    if unknown:
        raise ValidationError('UNKNOWN_FIELD', fields=unknown)

    if 'stock_id' in fields and _is_blank(fields['stock_id']):
        raise ValidationError('MISSING_FIELD', field='stock_id')

    cleaned = {}
    for name, value in fields.items():
        field = InventoryUnit._meta.get_field(name)
        if field.get_internal_type() == 'DecimalField':
            if value is not None:
                if not isinstance(value, (str, int, float, Decimal)):
                    raise ValidationError('INVALID_VALUE', field=name, value=repr(value)[:100])
                number = to_decimal(value, field.decimal_places)
                if number is None:
                    raise ValidationError('INVALID_VALUE', field=name, value=str(value)[:100])
                value = number
        elif isinstance(value, str):
            value = value.strip()
            if not value and field.null:
                value = None
        elif value is not None:
            raise ValidationError('INVALID_VALUE', field=name, value=repr(value)[:100])

        try:
            cleaned[name] = field.clean(value, None)
        except DjangoValidationError as e:
            raise ValidationError(
                'INVALID_VALUE',
                field=name,
                value=str(value)[:100],
                errors=e.messages,
            ) from None

    return cleaned


def _lock_unit(unit_id) -> InventoryUnit:
    try:
        return InventoryUnit.objects.select_for_update().get(pk=unit_id)
    except (InventoryUnit.DoesNotExist, ValueError, TypeError):
        raise NotFoundError('UNIT_NOT_FOUND', unit_id=unit_id) from None


def _check_stock_id_free(stock_id: str, exclude_pk=None) -> None:
    qs = InventoryUnit.objects.filter(stock_id=stock_id)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise ConflictError('DUPLICATE_STOCK_ID', stock_id=stock_id)


class UnitLifecycle:
    """Unit lifecycle methods."""

    @classmethod
    def get_unit(cls, unit_id) -> InventoryUnit:
        """Return a unit or raise NotFoundError('UNIT_NOT_FOUND')."""
        try:
            return InventoryUnit.objects.get(pk=unit_id)
        except (InventoryUnit.DoesNotExist, ValueError, TypeError):
            raise NotFoundError('UNIT_NOT_FOUND', unit_id=unit_id) from None

    @classmethod
    def create_unit(cls, status=UnitStatus.AVAILABLE, owning_transaction_id=None, **fields) -> InventoryUnit:
        """
        Create a unit by hand (outside the supplier feed).

        Args:
            status: Initial status (default available)
            owning_transaction_id: Required unless status is available
            **fields: Descriptive fields; REQUIRED_FIELDS must be present

        Raises:
            ValidationError('MISSING_FIELD' | 'UNKNOWN_FIELD' |
                'INVALID_VALUE' | 'INVALID_STATUS' | 'OWNER_REQUIRED')
            ConflictError('DUPLICATE_STOCK_ID')
        """
        for name in REQUIRED_FIELDS:
            if _is_blank(fields.get(name)):
                raise ValidationError('MISSING_FIELD', field=name)

        cleaned = _clean_fields(fields)
        status, owner = resolve_transition(status, owning_transaction_id)

        try:
            with transaction.atomic():
                _check_stock_id_free(cleaned['stock_id'])
                unit = InventoryUnit.objects.create(
                    status=status,
                    owning_transaction_id=owner,
                    **cleaned,
                )
        except IntegrityError:
            # Lost a race against a concurrent create or sync
            raise ConflictError('DUPLICATE_STOCK_ID', stock_id=cleaned['stock_id']) from None

        logger.info(
            "gemman.unit.created",
            extra={"unit_id": unit.pk, "stock_id": unit.stock_id, "status": unit.status},
        )
        return unit

    @classmethod
    def set_status(cls, unit_id, target_status, owning_transaction_id=None) -> InventoryUnit:
        """
        Transition a unit.

        Transitions:
            * -> AVAILABLE            owner cleared
            * -> HELD | MEMO | SOLD   owner required, set/replaced

        Raises:
            ValidationError('INVALID_STATUS' | 'OWNER_REQUIRED')
            NotFoundError('UNIT_NOT_FOUND')
        """
        status, owner = resolve_transition(target_status, owning_transaction_id)

        with transaction.atomic():
            unit = _lock_unit(unit_id)
            previous = unit.status

            unit.status = status
            unit.owning_transaction_id = owner
            unit.save(update_fields=['status', 'owning_transaction_id', 'updated_at'])

        logger.info(
            "gemman.unit.status_changed",
            extra={
                "unit_id": unit.pk,
                "stock_id": unit.stock_id,
                "from": previous,
                "to": status,
                "owning_transaction_id": owner,
            },
        )
        return unit

    @classmethod
    def release_transaction(cls, transaction_id: str) -> list[InventoryUnit]:
        """
        Release every unit owned by one transaction (cancelled order,
        returned memo, voided invoice).

        Returns:
            Released units, now AVAILABLE. Empty if none matched.

        Raises:
            ValidationError('OWNER_REQUIRED'): Blank transaction id
        """
        if _is_blank(transaction_id):
            raise ValidationError('OWNER_REQUIRED', field='owning_transaction_id')
        transaction_id = str(transaction_id).strip()

        with transaction.atomic():
            units = list(
                InventoryUnit.objects.select_for_update()
                .owned_by(transaction_id)
                .reserved()
                .order_by('pk')
            )
            for unit in units:
                unit.status, unit.owning_transaction_id = resolve_transition(UnitStatus.AVAILABLE)
                unit.save(update_fields=['status', 'owning_transaction_id', 'updated_at'])

        logger.info(
            "gemman.unit.transaction_released",
            extra={"owning_transaction_id": transaction_id, "units": [u.stock_id for u in units]},
        )
        return units

    @classmethod
    def update_unit(cls, unit_id, **changes) -> InventoryUnit:
        """
        Change descriptive fields and, optionally, the lifecycle.

        A status in changes follows set_status() rules, with the
        owning_transaction_id taken from changes only. Passing only
        owning_transaction_id re-points a reserved unit to another owner.

        Raises:
            ValidationError, NotFoundError, ConflictError
        """
        lifecycle = {k: changes.pop(k) for k in list(changes) if k in LIFECYCLE_FIELDS}
        cleaned = _clean_fields(changes)

        with transaction.atomic():
            unit = _lock_unit(unit_id)

            update_fields = list(cleaned)
            if 'status' in lifecycle:
                unit.status, unit.owning_transaction_id = resolve_transition(
                    lifecycle['status'], lifecycle.get('owning_transaction_id'),
                )
                update_fields += ['status', 'owning_transaction_id']
            elif lifecycle:
                if unit.is_available:
                    raise ValidationError(
                        'INVALID_VALUE',
                        'Pedra disponível não pode ter transação responsável',
                        field='owning_transaction_id',
                    )
                unit.status, unit.owning_transaction_id = resolve_transition(
                    unit.status, lifecycle['owning_transaction_id'],
                )
                update_fields += ['owning_transaction_id']

            if 'stock_id' in cleaned and cleaned['stock_id'] != unit.stock_id:
                _check_stock_id_free(cleaned['stock_id'], exclude_pk=unit.pk)

            for name, value in cleaned.items():
                setattr(unit, name, value)

            if update_fields:
                try:
                    with transaction.atomic():
                        unit.save(update_fields=update_fields + ['updated_at'])
                except IntegrityError:
                    raise ConflictError('DUPLICATE_STOCK_ID', stock_id=unit.stock_id) from None

        logger.info(
            "gemman.unit.updated",
            extra={"unit_id": unit.pk, "fields": sorted(update_fields)},
        )
        return unit

    @classmethod
    def delete_unit(cls, unit_id) -> None:
        """
        Hard delete a unit.

        Raises:
            NotFoundError('UNIT_NOT_FOUND')
        """
        with transaction.atomic():
            unit = _lock_unit(unit_id)
            stock_id = unit.stock_id
            unit.delete()

        logger.info("gemman.unit.deleted", extra={"unit_id": unit_id, "stock_id": stock_id})
