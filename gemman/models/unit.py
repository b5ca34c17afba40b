"""
InventoryUnit model — One individually identified stone.
"""

from decimal import Decimal

from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from gemman.models.enums import UnitStatus


# Fields hidden from non-elevated callers
RESTRICTED_FIELDS = frozenset({
    'owning_transaction_id',
    'rap_price',
    'rap_amount',
    'discount',
    'comment',
})


class InventoryUnitQuerySet(models.QuerySet):
    """QuerySet with helpers for unit lookups."""

    def reserved(self):
        """Units held, on memo or sold."""
        return self.filter(status__in=UnitStatus.reserving())

    def owned_by(self, transaction_id: str):
        """Units referencing one owning transaction."""
        return self.filter(owning_transaction_id=transaction_id)

    def matching(self, term: str):
        """Case-insensitive free-text match over identifier and grades."""
        return self.filter(
            Q(stock_id__icontains=term)
            | Q(certificate_no__icontains=term)
            | Q(shape__icontains=term)
            | Q(color__icontains=term)
            | Q(clarity__icontains=term)
            | Q(lab__icontains=term)
        )


class InventoryUnit(models.Model):
    """
    A graded stone tracked through its lifecycle.

    LIFECYCLE:

        AVAILABLE ──set_status(held|memo|sold, owner)──► HELD / MEMO / SOLD
            ▲                                                │
            └──────────────set_status(available)─────────────┘

    INVARIANT:
        status == AVAILABLE  ⟺  owning_transaction_id IS NULL

    Descriptive fields are owned by the supplier feed and overwritten on
    every sync. status and owning_transaction_id are owned by the
    lifecycle service and never touched by the sync.
    """

    stock_id = models.CharField(
        max_length=64,
        unique=True,
        verbose_name=_('Stock ID'),
        help_text=_('Identificador do fornecedor'),
    )
    certificate_no = models.CharField(max_length=64, blank=True, default='', verbose_name=_('Certificado'))

    # Grades
    shape = models.CharField(max_length=32, blank=True, default='', db_index=True, verbose_name=_('Formato'))
    size = models.DecimalField(
        max_digits=8,
        decimal_places=3,
        default=Decimal('0'),
        db_index=True,
        verbose_name=_('Peso (ct)'),
    )
    color = models.CharField(max_length=16, blank=True, default='', db_index=True, verbose_name=_('Cor'))
    clarity = models.CharField(max_length=16, blank=True, default='', db_index=True, verbose_name=_('Pureza'))
    cut = models.CharField(max_length=16, null=True, blank=True, verbose_name=_('Lapidação'))
    polish = models.CharField(max_length=16, blank=True, default='', verbose_name=_('Polimento'))
    symmetry = models.CharField(max_length=16, blank=True, default='', verbose_name=_('Simetria'))
    fluorescence = models.CharField(max_length=16, blank=True, default='', verbose_name=_('Fluorescência'))
    lab = models.CharField(max_length=16, blank=True, default='', verbose_name=_('Laboratório'))

    # Pricing
    rap_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'), verbose_name=_('Preço Rap'))
    rap_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'), verbose_name=_('Valor Rap'))
    discount = models.DecimalField(max_digits=7, decimal_places=2, default=Decimal('0'), verbose_name=_('Desconto (%)'))
    price_per_carat = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Preço por Quilate'),
    )
    final_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Valor Total'),
    )

    # Measurements
    measurement = models.CharField(max_length=64, blank=True, default='', verbose_name=_('Medidas'))
    length = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    width = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    height = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    depth = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    table = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    ratio = models.DecimalField(max_digits=6, decimal_places=3, null=True, blank=True)
    girdle = models.CharField(max_length=64, null=True, blank=True)
    culet = models.CharField(max_length=32, null=True, blank=True)
    crown_angle = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    crown_height = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    pavilion_angle = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    pavilion_depth = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)

    # Fancy colors
    fancy_color = models.CharField(max_length=64, null=True, blank=True)
    fancy_intensity = models.CharField(max_length=64, null=True, blank=True)
    fancy_overtone = models.CharField(max_length=64, null=True, blank=True)

    location = models.CharField(max_length=64, null=True, blank=True, verbose_name=_('Localização'))
    inscription = models.CharField(max_length=128, null=True, blank=True)
    comment = models.TextField(null=True, blank=True, verbose_name=_('Comentário'))
    video_url = models.URLField(max_length=500, null=True, blank=True)
    image_url = models.URLField(max_length=500, null=True, blank=True)
    cert_url = models.URLField(max_length=500, null=True, blank=True)
    feed_status = models.CharField(
        max_length=32,
        blank=True,
        default='',
        verbose_name=_('Status no Fornecedor'),
        help_text=_('Informativo. Não altera o ciclo de vida.'),
    )

    # Lifecycle
    status = models.CharField(
        max_length=20,
        choices=UnitStatus.choices,
        default=UnitStatus.AVAILABLE,
        db_index=True,
        verbose_name=_('Status'),
    )
    owning_transaction_id = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        db_index=True,
        verbose_name=_('Transação Responsável'),
        help_text=_('Pedido, remessa ou memo que reservou/comprou a pedra'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = InventoryUnitQuerySet.as_manager()

    class Meta:
        verbose_name = _('Pedra')
        verbose_name_plural = _('Pedras')
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(status=UnitStatus.AVAILABLE, owning_transaction_id__isnull=True)
                    | (~Q(status=UnitStatus.AVAILABLE) & Q(owning_transaction_id__isnull=False))
                ),
                name='unit_owner_matches_status',
            ),
        ]
        indexes = [
            models.Index(fields=['status', 'updated_at'], name='unit_status_updated_idx'),
        ]

    @property
    def is_available(self) -> bool:
        return self.status == UnitStatus.AVAILABLE

    def __str__(self) -> str:
        return f"{self.stock_id} {self.shape} {self.size}ct ({self.get_status_display()})"
