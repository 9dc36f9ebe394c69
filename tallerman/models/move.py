"""
StockMove model — Immutable audit trail of batch quantity changes.
"""

from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class StockMove(models.Model):
    """
    Immutable record of a batch quantity change.

    Rules:
    - NEVER update() or delete()
    - Written by StockLedger next to every change of Batch.current_quantity
    - batch_ref keeps the batch id after the batch itself is deleted
    """

    product = models.ForeignKey(
        'tallerman.Product',
        on_delete=models.CASCADE,
        related_name='moves',
        verbose_name=_('Producto'),
    )
    batch = models.ForeignKey(
        'tallerman.Batch',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='moves',
        verbose_name=_('Lote'),
    )
    batch_ref = models.PositiveIntegerField(verbose_name=_('ID del Lote'))

    delta = models.IntegerField(
        verbose_name=_('Variación'),
        help_text=_('Positivo = entrada, Negativo = salida'),
    )

    # External reference (evaluation line item, work order, etc)
    reference_type = models.ForeignKey(
        ContentType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Tipo de Referencia'),
    )
    reference_id = models.PositiveIntegerField(null=True, blank=True, verbose_name=_('ID de Referencia'))
    reference = GenericForeignKey('reference_type', 'reference_id')

    reason = models.CharField(
        max_length=255,
        verbose_name=_('Motivo'),
        help_text=_('Obligatorio. Ej: "Ingreso proveedor", "Evaluación #12"'),
    )
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_('Metadatos'))

    timestamp = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Fecha/Hora'))
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        verbose_name=_('Usuario'),
    )

    class Meta:
        verbose_name = _('Movimiento')
        verbose_name_plural = _('Movimientos')
        ordering = ['timestamp', 'pk']
        indexes = [
            models.Index(fields=['product', 'timestamp'], name='taller_move_product_time'),
        ]

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValueError(
                "Los movimientos son inmutables. "
                "Para corregir, registre un nuevo movimiento con delta inverso."
            )
        if not self.reason:
            raise ValueError("El motivo es obligatorio")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError(
            "Los movimientos son inmutables. "
            "Para revertir, registre un nuevo movimiento con delta inverso."
        )

    def __str__(self) -> str:
        signal = '+' if self.delta > 0 else ''
        return f"{signal}{self.delta} | {self.reason}"
