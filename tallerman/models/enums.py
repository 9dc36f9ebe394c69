"""
Enums for Tallerman models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class ProductStatus(models.TextChoices):
    """Catalog status of a product."""
    ACTIVE = 'active', _('Activo')
    INACTIVE = 'inactive', _('Inactivo')


class EvaluationStatus(models.TextChoices):
    """
    Evaluation lifecycle status.

    DRAFT --submit--> SENT --approve--> APPROVED
      │                 │
      └─────reject──────┴──────────────► REJECTED

    APPROVED and REJECTED are terminal.
    """
    DRAFT = 'draft', _('Borrador')
    SENT = 'sent', _('Enviada')
    APPROVED = 'approved', _('Aprobada')
    REJECTED = 'rejected', _('Rechazada')


# Statuses in which line items may still be added, removed or edited
EDITABLE_STATUSES = (EvaluationStatus.DRAFT, EvaluationStatus.SENT)

# Statuses that no longer occupy the vehicle
RELEASED_STATUSES = (EvaluationStatus.REJECTED,)


class LineItemOrigin(models.TextChoices):
    """Where the price of a line item comes from."""
    DIAGNOSIS = 'diagnosis', _('Diagnóstico')   # Reserved first item
    MANUAL = 'manual', _('Mano de obra')        # Labor / free text
    INVENTORY = 'inventory', _('Repuesto')      # Parts consumed from batches
    EXTERNAL = 'external', _('Externo')         # Hired from another workshop


class WorkOrderStatus(models.TextChoices):
    """Work order progress. Any value may follow any other."""
    PENDING = 'pending', _('Pendiente')
    IN_PROGRESS = 'in_progress', _('En Taller')
    WAITING_PARTS = 'waiting_parts', _('Esp. Repuestos')
    FINISHED = 'finished', _('Terminado')
    DELIVERED = 'delivered', _('Entregado')


class SlotKind(models.TextChoices):
    """Published window vs. hired window of an external service."""
    AVAILABLE = 'available', _('Disponible')
    BOOKED = 'booked', _('Reservado')


class StaffRole(models.TextChoices):
    """Roles of workshop staff members."""
    OWNER = 'owner', _('Dueño')
    ADMINISTRATION = 'administration', _('Administración')
    MECHANIC = 'mechanic', _('Mecánico')
    HELPER = 'helper', _('Ayudante')


class RequestStatus(models.TextChoices):
    """
    Provider answer to a hire request on a booked slot.

    PENDING --respond--> ACCEPTED --respond--> COMPLETED
       │
       └──respond──► REJECTED (the slot goes back to available)
    """
    PENDING = 'pending', _('Pendiente')
    ACCEPTED = 'accepted', _('Aceptada')
    REJECTED = 'rejected', _('Rechazada')
    COMPLETED = 'completed', _('Finalizada')


# Allowed provider answers per current request status
REQUEST_TRANSITIONS = {
    RequestStatus.PENDING: (RequestStatus.ACCEPTED, RequestStatus.REJECTED),
    RequestStatus.ACCEPTED: (RequestStatus.COMPLETED,),
}
