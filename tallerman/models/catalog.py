"""
Catalog models — clients, their vehicles and the parts catalog.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from tallerman.models.enums import ProductStatus


class Client(models.Model):
    """Workshop customer."""

    first_name = models.CharField(max_length=100, verbose_name=_('Nombre'))
    last_name = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Apellido'))
    email = models.EmailField(blank=True, default='', verbose_name=_('Correo'))
    phone = models.CharField(max_length=30, blank=True, default='', verbose_name=_('Teléfono'))

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Cliente')
        verbose_name_plural = _('Clientes')
        ordering = ['last_name', 'first_name']

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Vehicle(models.Model):
    """
    Vehicle of a client.

    A vehicle is the resource occupied by an evaluation: it can only have
    one non-rejected evaluation at a time.
    """

    client = models.ForeignKey(
        Client,
        on_delete=models.CASCADE,
        related_name='vehicles',
        verbose_name=_('Cliente'),
    )
    brand = models.CharField(max_length=60, verbose_name=_('Marca'))
    model = models.CharField(max_length=60, verbose_name=_('Modelo'))
    plate = models.CharField(max_length=20, unique=True, verbose_name=_('Patente'))
    year = models.PositiveSmallIntegerField(null=True, blank=True, verbose_name=_('Año'))

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Vehículo')
        verbose_name_plural = _('Vehículos')
        ordering = ['plate']

    def __str__(self) -> str:
        return f"{self.brand} {self.model} ({self.plate})"


class Product(models.Model):
    """
    Catalog entry for a part or consumable.

    A product never stores quantity: stock lives in its Batches and is
    derived by summing their current_quantity.
    """

    name = models.CharField(max_length=200, verbose_name=_('Nombre'))
    sku = models.CharField(max_length=60, unique=True, verbose_name=_('SKU'))
    category = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Categoría'))
    location = models.CharField(
        max_length=100,
        blank=True,
        default='',
        verbose_name=_('Ubicación'),
        help_text=_('Estante o bodega donde se guarda'),
    )
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        verbose_name=_('Precio de venta'),
    )
    status = models.CharField(
        max_length=20,
        choices=ProductStatus.choices,
        default=ProductStatus.ACTIVE,
        verbose_name=_('Estado'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Producto')
        verbose_name_plural = _('Productos')
        ordering = ['name']

    @property
    def available_quantity(self) -> int:
        """Sum of current_quantity over all batches."""
        from tallerman.services.ledger import StockLedger
        return StockLedger.available_quantity(self)

    @property
    def stock_status(self) -> str:
        """'active', 'inactive' or 'out' (active but without stock)."""
        if self.status == ProductStatus.ACTIVE and self.available_quantity == 0:
            return 'out'
        return self.status

    def __str__(self) -> str:
        return f"{self.name} [{self.sku}]"
