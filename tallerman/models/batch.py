"""
Batch model — a dated, priced lot of a product.

Stock is tracked as discrete batches, not as a single counter:
- Each receipt creates a new Batch (initial_quantity == current_quantity)
- Consumption takes from the oldest entry_date first (FIFO)
- Administrative corrections are explicit and flagged when they push
  current_quantity above initial_quantity

Usage:
    from tallerman.services.ledger import StockLedger

    batch = StockLedger.receive_batch(
        filtro_aceite, 5, unit_cost=Decimal('3500'),
        entry_date=date.today(),
    )
"""

from datetime import date

from django.db import models
from django.utils.translation import gettext_lazy as _


class BatchQuerySet(models.QuerySet):
    """Custom QuerySet for Batch with convenience filters."""

    def active(self):
        """Batches with remaining stock."""
        return self.filter(current_quantity__gt=0)

    def fifo(self):
        """Consumption order: oldest entry first, ties by creation order."""
        return self.order_by('entry_date', 'pk')

    def expiring_before(self, when):
        """Batches expiring on or before the given date."""
        return self.filter(expiration_date__lte=when, expiration_date__isnull=False)

    def expired(self):
        """Batches past their expiration date."""
        return self.filter(expiration_date__lt=date.today())

    def flagged(self):
        """Batches whose overstock was confirmed by a manual correction."""
        return self.filter(overstock_confirmed=True)

    def for_product(self, product):
        """Filter batches for a specific product."""
        return self.filter(product=product)


class Batch(models.Model):
    """
    Lot of a product received at one time.

    Invariants:
    - current_quantity >= 0
    - current_quantity <= initial_quantity, unless overstock_confirmed

    Only StockLedger mutates batches.
    """

    product = models.ForeignKey(
        'tallerman.Product',
        on_delete=models.CASCADE,
        related_name='batches',
        verbose_name=_('Producto'),
    )

    code = models.CharField(
        max_length=50,
        blank=True,
        default='',
        verbose_name=_('Código del Lote'),
    )
    supplier = models.CharField(
        max_length=200,
        blank=True,
        default='',
        verbose_name=_('Proveedor'),
    )

    initial_quantity = models.PositiveIntegerField(verbose_name=_('Cantidad inicial'))
    current_quantity = models.PositiveIntegerField(verbose_name=_('Cantidad actual'))
    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        verbose_name=_('Costo unitario'),
    )

    entry_date = models.DateField(
        db_index=True,
        verbose_name=_('Fecha de ingreso'),
    )
    expiration_date = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('Fecha de vencimiento'),
    )

    overstock_confirmed = models.BooleanField(
        default=False,
        verbose_name=_('Sobrestock confirmado'),
        help_text=_('Corrección manual con cantidad actual mayor a la inicial'),
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Creado en'))
    updated_at = models.DateTimeField(auto_now=True)

    objects = BatchQuerySet.as_manager()

    class Meta:
        verbose_name = _('Lote')
        verbose_name_plural = _('Lotes')
        ordering = ['entry_date', 'pk']
        indexes = [
            models.Index(fields=['product', 'entry_date'], name='taller_batch_product_entry'),
        ]

    @property
    def is_expired(self) -> bool:
        """Is this batch past its expiration date?"""
        if self.expiration_date is None:
            return False
        return date.today() > self.expiration_date

    @property
    def stock_value(self):
        """Cost of the remaining units."""
        return self.unit_cost * self.current_quantity

    def __str__(self) -> str:
        label = self.code or f"#{self.pk}"
        return f"Lote {label}: {self.current_quantity}/{self.initial_quantity} ({self.entry_date})"
