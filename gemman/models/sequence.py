"""
DocumentSequence model — Daily counter per document type.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class DocumentSequence(models.Model):
    """
    Last sequence issued for a document type on a given day.

    One row per (document_type, bucket). Incremented only by
    DocumentNumbers.issue() under a row lock, inside the caller's
    transaction: a rollback returns the number.
    """

    document_type = models.CharField(max_length=20, verbose_name=_('Tipo de Documento'))
    bucket = models.DateField(verbose_name=_('Dia'))
    last_value = models.PositiveIntegerField(verbose_name=_('Último Número'))
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Sequência de Documento')
        verbose_name_plural = _('Sequências de Documento')
        ordering = ['-bucket', 'document_type']
        constraints = [
            models.UniqueConstraint(
                fields=['document_type', 'bucket'],
                name='unique_document_sequence_bucket',
            )
        ]

    def __str__(self) -> str:
        return f"{self.document_type} {self.bucket:%d/%m/%Y} #{self.last_value}"
