"""
Workshop services — one class per component, in dependency order:

    StockLedger -> BookingCalendar -> EvaluationEngine -> OrderGenerator
                                                       -> WorkOrderTracker

    from tallerman.services import StockLedger, EvaluationEngine
"""

from tallerman.services.calendar import BookingCalendar, SlotProposal
from tallerman.services.evaluations import EvaluationEngine, Totals
from tallerman.services.ledger import ConsumptionEntry, StockLedger
from tallerman.services.orders import OrderGenerator, WorkOrderTracker

__all__ = [
    'StockLedger',
    'ConsumptionEntry',
    'BookingCalendar',
    'SlotProposal',
    'EvaluationEngine',
    'Totals',
    'OrderGenerator',
    'WorkOrderTracker',
]
