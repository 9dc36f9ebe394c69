"""
WorkOrder models — execution record of an approved evaluation.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _

from tallerman.models.enums import LineItemOrigin, WorkOrderStatus


class WorkOrder(models.Model):
    """
    Work order generated from exactly one approved evaluation.

    Holds a by-value snapshot of the approved line items (WorkOrderItem),
    so later edits to the evaluation never leak into the order.
    """

    evaluation = models.OneToOneField(
        'tallerman.Evaluation',
        on_delete=models.PROTECT,
        related_name='work_order',
        verbose_name=_('Evaluación'),
    )
    status = models.CharField(
        max_length=20,
        choices=WorkOrderStatus.choices,
        default=WorkOrderStatus.PENDING,
        db_index=True,
        verbose_name=_('Estado'),
    )
    mechanic = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='work_orders',
        verbose_name=_('Mecánico'),
    )
    internal_notes = models.TextField(blank=True, default='', verbose_name=_('Notas internas'))
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_('Metadatos'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Orden de Trabajo')
        verbose_name_plural = _('Órdenes de Trabajo')
        ordering = ['-created_at']

    @property
    def total(self) -> Decimal:
        return self.items.aggregate(
            t=Coalesce(Sum('price'), Decimal('0'))
        )['t']

    def __str__(self) -> str:
        return f"Orden #{self.pk} ({self.get_status_display()})"


class WorkOrderItem(models.Model):
    """Snapshot of an approved line item, copied by value."""

    work_order = models.ForeignKey(
        WorkOrder,
        on_delete=models.CASCADE,
        related_name='items',
        verbose_name=_('Orden'),
    )
    position = models.PositiveIntegerField(verbose_name=_('Posición'))
    description = models.CharField(max_length=255, verbose_name=_('Descripción'))
    price = models.DecimalField(max_digits=12, decimal_places=2, verbose_name=_('Precio'))
    origin = models.CharField(
        max_length=20,
        choices=LineItemOrigin.choices,
        verbose_name=_('Origen'),
    )
    quantity = models.PositiveIntegerField(null=True, blank=True, verbose_name=_('Cantidad'))
    sku = models.CharField(max_length=60, blank=True, default='', verbose_name=_('SKU'))
    external_ref = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Referencia externa'))

    class Meta:
        verbose_name = _('Ítem de Orden')
        verbose_name_plural = _('Ítems de Orden')
        ordering = ['work_order', 'position']

    def __str__(self) -> str:
        return f"{self.position}. {self.description} ${self.price}"
