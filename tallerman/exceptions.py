"""
Exceptions for Tallerman.

All errors are TallerError with a structured code for programmatic handling.
References to rows that do not exist raise NotFound, a distinct subclass.
"""

from decimal import Decimal
from typing import Any


class TallerError(Exception):
    """
    Structured exception for workshop operations.

    Usage:
        try:
            ledger.consume(producto, 10)
        except TallerError as e:
            if e.code == 'INSUFFICIENT_STOCK':
                print(f"Solo hay {e.available} disponibles")

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages = {
        'INVALID_QUANTITY': 'Cantidad inválida (debe ser positiva)',
        'INVALID_PRICE': 'Precio o costo inválido (no puede ser negativo)',
        'INSUFFICIENT_STOCK': 'Stock insuficiente para la cantidad solicitada',
        'BATCH_NOT_FOUND': 'El lote fue eliminado y no se puede restituir',
        'INCONSISTENT_CORRECTION': 'La cantidad actual supera la inicial; confirme la corrección',
        'INVALID_INTERVAL': 'La fecha de fin debe ser posterior a la fecha de inicio',
        'SLOT_CONFLICT': 'El horario se superpone con otro horario del mismo recurso',
        'SLOT_BOOKED': 'El horario ya está reservado y no se puede modificar',
        'SERVICE_UNAVAILABLE': 'El servicio externo no está disponible',
        'VEHICLE_BUSY': 'El vehículo ya tiene una evaluación activa',
        'INVALID_STATUS': 'Estado inválido para esta operación',
        'DIAGNOSIS_LOCKED': 'El ítem de diagnóstico no se puede eliminar ni cambiar de tipo',
        'NOT_APPROVED': 'La evaluación no está aprobada',
        'ALREADY_GENERATED': 'La evaluación ya tiene una orden de trabajo',
        'PERMISSION_DENIED': 'No tiene permisos para esta operación',
        'NOT_FOUND': 'Registro no encontrado',
    }

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, {self.data!r})"

    @property
    def available(self) -> int:
        """Shortcut for data['available']."""
        return self.data.get('available', 0)

    @property
    def requested(self) -> int:
        """Shortcut for data['requested']."""
        return self.data.get('requested', 0)

    @property
    def conflict_with(self):
        """Shortcut for data['conflict_with'] (pk of the blocking row)."""
        return self.data.get('conflict_with')

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }


class NotFound(TallerError):
    """A referenced row does not exist (404-style, recoverable)."""

    def __init__(self, model: str, pk, message: str | None = None):
        super().__init__('NOT_FOUND', message, model=model, pk=pk)
