"""
Evaluation models — diagnostic quote and its priced line items.
"""

from decimal import Decimal

from django.db import models
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _

from tallerman.models.enums import (
    EDITABLE_STATUSES,
    RELEASED_STATUSES,
    EvaluationStatus,
    LineItemOrigin,
)


class EvaluationQuerySet(models.QuerySet):

    def occupying(self):
        """Evaluations that keep their vehicle busy (anything not rejected)."""
        return self.exclude(status__in=RELEASED_STATUSES)

    def for_vehicle(self, vehicle):
        return self.filter(vehicle=vehicle)


class Evaluation(models.Model):
    """
    Diagnostic quote for one vehicle.

    LIFECYCLE:

        ┌───────┐  submit()  ┌──────┐  approve()  ┌──────────┐
        │ DRAFT │ ─────────► │ SENT │ ──────────► │ APPROVED │ ──► WorkOrder
        └───────┘            └──────┘             └──────────┘
            │                    │
            │ reject()           │ reject()
            ▼                    ▼
        ┌──────────────────────────┐
        │         REJECTED         │
        └──────────────────────────┘

    Items may be edited while DRAFT or SENT. A vehicle has at most one
    evaluation that is not REJECTED.
    """

    client = models.ForeignKey(
        'tallerman.Client',
        on_delete=models.PROTECT,
        related_name='evaluations',
        verbose_name=_('Cliente'),
    )
    vehicle = models.ForeignKey(
        'tallerman.Vehicle',
        on_delete=models.PROTECT,
        related_name='evaluations',
        verbose_name=_('Vehículo'),
    )
    status = models.CharField(
        max_length=20,
        choices=EvaluationStatus.choices,
        default=EvaluationStatus.DRAFT,
        db_index=True,
        verbose_name=_('Estado'),
    )
    notes = models.TextField(blank=True, default='', verbose_name=_('Observaciones'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    sent_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Enviada en'))
    resolved_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Resuelta en'),
        help_text=_('Fecha de aprobación o rechazo'),
    )

    objects = EvaluationQuerySet.as_manager()

    class Meta:
        verbose_name = _('Evaluación')
        verbose_name_plural = _('Evaluaciones')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['vehicle', 'status'], name='taller_eval_vehicle_status'),
        ]

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES

    @property
    def total_quoted(self) -> Decimal:
        return self.items.aggregate(
            t=Coalesce(Sum('price'), Decimal('0'))
        )['t']

    @property
    def total_approved(self) -> Decimal:
        return self.items.filter(approved=True).aggregate(
            t=Coalesce(Sum('price'), Decimal('0'))
        )['t']

    def __str__(self) -> str:
        return f"Evaluación #{self.pk} {self.vehicle} ({self.get_status_display()})"


class LineItem(models.Model):
    """
    Priced, individually approvable line of an evaluation.

    position 0 is the reserved diagnosis item. Inventory items keep the
    consumption trace returned by the ledger so it can be restored:
        [{"batch": 3, "quantity": 2}, {"batch": 5, "quantity": 1}]
    """

    evaluation = models.ForeignKey(
        Evaluation,
        on_delete=models.CASCADE,
        related_name='items',
        verbose_name=_('Evaluación'),
    )
    position = models.PositiveIntegerField(verbose_name=_('Posición'))
    description = models.CharField(max_length=255, verbose_name=_('Descripción'))
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Precio'),
    )
    approved = models.BooleanField(
        default=True,
        verbose_name=_('Aprobado'),
        help_text=_('Marcar si el cliente aprueba este ítem'),
    )
    origin = models.CharField(
        max_length=20,
        choices=LineItemOrigin.choices,
        default=LineItemOrigin.MANUAL,
        verbose_name=_('Origen'),
    )

    # Inventory origin
    product = models.ForeignKey(
        'tallerman.Product',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Producto'),
    )
    quantity = models.PositiveIntegerField(null=True, blank=True, verbose_name=_('Cantidad'))
    consumption = models.JSONField(default=list, blank=True, verbose_name=_('Consumo de lotes'))
    consumption_committed = models.BooleanField(
        default=False,
        verbose_name=_('Consumo definitivo'),
        help_text=_('La orden de trabajo ya descontó este consumo'),
    )

    # External origin
    external_ref = models.CharField(
        max_length=100,
        blank=True,
        default='',
        verbose_name=_('Referencia externa'),
    )
    external_service = models.ForeignKey(
        'tallerman.ExternalService',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Servicio externo'),
    )
    slot = models.ForeignKey(
        'tallerman.Slot',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Horario'),
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Ítem')
        verbose_name_plural = _('Ítems')
        ordering = ['evaluation', 'position']
        indexes = [
            models.Index(fields=['evaluation', 'position'], name='taller_item_eval_position'),
        ]
        constraints = [
            models.UniqueConstraint(fields=['evaluation', 'position'], name='taller_item_unique_position'),
        ]

    @property
    def is_diagnosis(self) -> bool:
        return self.origin == LineItemOrigin.DIAGNOSIS

    @property
    def has_consumption(self) -> bool:
        return bool(self.consumption) and not self.consumption_committed

    def __str__(self) -> str:
        mark = '✓' if self.approved else '·'
        return f"{mark} {self.position}. {self.description} ${self.price}"
