"""
Django Tallerman — Motor transaccional del taller.

Inventario por lotes (FIFO), evaluaciones con ítems aprobables, agenda de
servicios externos y órdenes de trabajo.

Uso:
    from tallerman import Workshop, WorkshopContext, TallerError

    taller = Workshop(WorkshopContext.from_user(usuario, role='owner'))
    taller.receive_batch(filtro, 5, Decimal('3500'))
    taller.consume(filtro, 2)
    taller.available_quantity(filtro).value  # 3
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'Workshop':
        from tallerman.service import Workshop
        return Workshop
    elif name == 'WorkshopContext':
        from tallerman.context import WorkshopContext
        return WorkshopContext
    elif name == 'Outcome':
        from tallerman.results import Outcome
        return Outcome
    elif name == 'TallerError':
        from tallerman.exceptions import TallerError
        return TallerError
    elif name == 'NotFound':
        from tallerman.exceptions import NotFound
        return NotFound
    elif name == 'Product':
        from tallerman.models.catalog import Product
        return Product
    elif name == 'Batch':
        from tallerman.models.batch import Batch
        return Batch
    elif name == 'Evaluation':
        from tallerman.models.evaluation import Evaluation
        return Evaluation
    elif name == 'WorkOrder':
        from tallerman.models.work_order import WorkOrder
        return WorkOrder
    elif name == 'Slot':
        from tallerman.models.calendar import Slot
        return Slot
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'Workshop',
    'WorkshopContext',
    'Outcome',
    'TallerError',
    'NotFound',
    'Product',
    'Batch',
    'Evaluation',
    'WorkOrder',
    'Slot',
]

__version__ = '0.1.0'
