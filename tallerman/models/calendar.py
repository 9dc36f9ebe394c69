"""
Booking models — external services offered by other workshops and their
time windows.
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from tallerman.models.enums import RequestStatus, SlotKind


class ExternalService(models.Model):
    """
    Service published on the marketplace by a workshop (alignment, paint,
    electrical diagnosis...). It is the bookable resource of its Slots.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='external_services',
        verbose_name=_('Publicado por'),
    )
    title = models.CharField(max_length=200, verbose_name=_('Título'))
    description = models.TextField(blank=True, default='', verbose_name=_('Descripción'))
    category = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Categoría'))
    price = models.DecimalField(max_digits=12, decimal_places=2, verbose_name=_('Precio'))
    duration_minutes = models.PositiveIntegerField(
        null=True,
        blank=True,
        verbose_name=_('Duración (min)'),
    )
    available = models.BooleanField(
        default=True,
        verbose_name=_('Disponible'),
        help_text=_('Si está desactivado no se puede contratar'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Servicio Externo')
        verbose_name_plural = _('Servicios Externos')
        ordering = ['title']

    def __str__(self) -> str:
        return self.title


class SlotQuerySet(models.QuerySet):

    def for_service(self, service):
        return self.filter(service=service)

    def available(self):
        return self.filter(kind=SlotKind.AVAILABLE)

    def booked(self):
        return self.filter(kind=SlotKind.BOOKED)

    def received_by(self, user):
        """Hire requests on services published by user."""
        return self.filter(service__owner=user).exclude(request_status='')

    def sent_by(self, user):
        """Hire requests made by user."""
        return self.filter(requested_by=user).exclude(request_status='')


class Slot(models.Model):
    """
    Half-open time window [start, end) of an external service.

    Invariants:
    - end > start
    - No two slots of the same service overlap
    """

    service = models.ForeignKey(
        ExternalService,
        on_delete=models.CASCADE,
        related_name='slots',
        verbose_name=_('Servicio'),
    )
    title = models.CharField(max_length=200, blank=True, default='', verbose_name=_('Título'))
    start = models.DateTimeField(verbose_name=_('Inicio'))
    end = models.DateTimeField(verbose_name=_('Fin'))
    kind = models.CharField(
        max_length=20,
        choices=SlotKind.choices,
        default=SlotKind.AVAILABLE,
        db_index=True,
        verbose_name=_('Tipo'),
    )
    evaluation = models.ForeignKey(
        'tallerman.Evaluation',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='booked_slots',
        verbose_name=_('Evaluación'),
        help_text=_('Evaluación que contrató este horario'),
    )
    request_status = models.CharField(
        max_length=20,
        choices=RequestStatus.choices,
        blank=True,
        default='',
        verbose_name=_('Estado de la solicitud'),
        help_text=_('Respuesta del proveedor; vacío si nunca fue contratado'),
    )
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='slot_requests',
        verbose_name=_('Solicitado por'),
    )
    responded_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Respondida en'))

    created_at = models.DateTimeField(auto_now_add=True)

    objects = SlotQuerySet.as_manager()

    class Meta:
        verbose_name = _('Horario')
        verbose_name_plural = _('Horarios')
        ordering = ['service', 'start']
        indexes = [
            models.Index(fields=['service', 'start'], name='taller_slot_service_start'),
        ]

    @property
    def is_booked(self) -> bool:
        return self.kind == SlotKind.BOOKED

    def __str__(self) -> str:
        return f"{self.service} [{self.start:%d/%m/%y %H:%M} - {self.end:%H:%M}]"
