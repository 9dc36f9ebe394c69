"""
Workshop Service — The single public interface of the engine.

Usage:
    from tallerman import Workshop, WorkshopContext

    taller = Workshop(WorkshopContext.from_user(request.user, role='owner'))

    taller.receive_batch(filtro, 5, Decimal('3500'), entry_date=hoy)
    outcome = taller.create_draft(cliente, auto)
    if outcome.ok:
        taller.add_inventory_item(outcome.value, filtro, 2)

Every method returns an Outcome: business failures are values, never
exceptions. Only programmer errors unrelated to the engine propagate.
"""

import logging

from tallerman.context import WorkshopContext
from tallerman.exceptions import TallerError
from tallerman.results import Outcome
from tallerman.services.calendar import BookingCalendar
from tallerman.services.evaluations import EvaluationEngine
from tallerman.services.ledger import StockLedger
from tallerman.services.orders import OrderGenerator, WorkOrderTracker

logger = logging.getLogger('tallerman')


def _attempt(func, *args, **kwargs) -> Outcome:
    try:
        return Outcome.success(func(*args, **kwargs))
    except TallerError as exc:
        logger.info(
            "taller.rejected",
            extra={"operation": func.__name__, "code": exc.code},
        )
        return Outcome.failure(exc)


class Workshop:
    """
    Facade over StockLedger, BookingCalendar, EvaluationEngine,
    OrderGenerator and WorkOrderTracker.

    Parameter convention: the thing acted upon first, then quantities and
    prices. Models or their pks are accepted anywhere.
    """

    def __init__(self, context: WorkshopContext | None = None):
        self.context = context or WorkshopContext()

    @property
    def user(self):
        return self.context.user

    def _require_correction_role(self):
        if not self.context.can_correct_stock:
            raise TallerError('PERMISSION_DENIED', role=str(self.context.role))

    # ══════════════════════════════════════════════════════════════
    # STOCK LEDGER
    # ══════════════════════════════════════════════════════════════

    def available_quantity(self, product) -> Outcome:
        return _attempt(StockLedger.available_quantity, product)

    def receive_batch(self, product, quantity, unit_cost, entry_date=None,
                      expiration_date=None, **kwargs) -> Outcome:
        return _attempt(
            StockLedger.receive_batch, product, quantity, unit_cost,
            entry_date=entry_date, expiration_date=expiration_date,
            user=self.user, **kwargs,
        )

    def consume(self, product, quantity, reference=None) -> Outcome:
        return _attempt(StockLedger.consume, product, quantity,
                        reference=reference, user=self.user)

    def restore(self, trace, reference=None) -> Outcome:
        return _attempt(StockLedger.restore, trace, reference=reference, user=self.user)

    def correct_batch(self, batch, initial_quantity, current_quantity, unit_cost,
                      entry_date, expiration_date=None, confirm_overstock=False) -> Outcome:
        def correct():
            self._require_correction_role()
            return StockLedger.correct_batch(
                batch, initial_quantity, current_quantity, unit_cost,
                entry_date, expiration_date,
                confirm_overstock=confirm_overstock, user=self.user,
            )
        return _attempt(correct)

    def delete_batch(self, batch) -> Outcome:
        def delete():
            self._require_correction_role()
            return StockLedger.delete_batch(batch, user=self.user)
        return _attempt(delete)

    # ══════════════════════════════════════════════════════════════
    # BOOKING CALENDAR
    # ══════════════════════════════════════════════════════════════

    def propose_slot(self, service, start, end, exclude_slot=None) -> Outcome:
        return _attempt(BookingCalendar.propose_slot, service, start, end, exclude_slot)

    def commit_slot(self, service, start, end, title='') -> Outcome:
        return _attempt(BookingCalendar.commit_slot, service, start, end, title)

    def move_slot(self, slot, start, end) -> Outcome:
        return _attempt(BookingCalendar.move_slot, slot, start, end)

    def remove_slot(self, slot) -> Outcome:
        return _attempt(BookingCalendar.remove_slot, slot)

    def book_slot(self, slot, evaluation=None) -> Outcome:
        return _attempt(BookingCalendar.book_slot, slot, evaluation, requester=self.user)

    def release_slot(self, slot, evaluation=None) -> Outcome:
        return _attempt(BookingCalendar.release_slot, slot, evaluation)

    def respond_request(self, slot, status) -> Outcome:
        """Answer a hire request on one of the context user's services."""
        return _attempt(BookingCalendar.respond_request, slot, status, user=self.user)

    def requests_received(self) -> Outcome:
        return _attempt(lambda: list(BookingCalendar.requests_received(self.user)))

    def requests_sent(self) -> Outcome:
        return _attempt(lambda: list(BookingCalendar.requests_sent(self.user)))

    def upcoming_slots(self, service, include_booked=True) -> Outcome:
        return _attempt(lambda: list(BookingCalendar.upcoming(service, include_booked)))

    def vehicle_busy(self, vehicle) -> Outcome:
        """Outcome value is the occupying Evaluation, or None."""
        return _attempt(BookingCalendar.vehicle_busy, vehicle)

    # ══════════════════════════════════════════════════════════════
    # EVALUATIONS
    # ══════════════════════════════════════════════════════════════

    def create_draft(self, client, vehicle, notes='', diagnosis_price=None) -> Outcome:
        return _attempt(EvaluationEngine.create_draft, client, vehicle, notes, diagnosis_price)

    def add_manual_item(self, evaluation, description, price, approved=True) -> Outcome:
        return _attempt(EvaluationEngine.add_manual_item, evaluation, description, price, approved)

    def add_inventory_item(self, evaluation, product, quantity, price=None,
                           approved=True) -> Outcome:
        return _attempt(
            EvaluationEngine.add_inventory_item, evaluation, product, quantity,
            price=price, approved=approved, user=self.user,
        )

    def add_external_item(self, evaluation, external_ref, price, description='',
                          approved=True) -> Outcome:
        return _attempt(
            EvaluationEngine.add_external_item, evaluation, external_ref, price,
            description=description, approved=approved,
        )

    def hire_external_service(self, evaluation, slot, approved=True) -> Outcome:
        return _attempt(
            EvaluationEngine.hire_external_service, evaluation, slot,
            approved=approved, user=self.user,
        )

    def remove_item(self, evaluation, index) -> Outcome:
        return _attempt(EvaluationEngine.remove_item, evaluation, index, user=self.user)

    def reprice_item(self, evaluation, index, price) -> Outcome:
        return _attempt(EvaluationEngine.reprice_item, evaluation, index, price)

    def set_approval(self, evaluation, index, approved) -> Outcome:
        return _attempt(EvaluationEngine.set_approval, evaluation, index, approved)

    def set_evaluation_notes(self, evaluation, notes) -> Outcome:
        return _attempt(EvaluationEngine.set_notes, evaluation, notes)

    def compute_totals(self, evaluation) -> Outcome:
        return _attempt(EvaluationEngine.compute_totals, evaluation)

    def submit(self, evaluation) -> Outcome:
        return _attempt(EvaluationEngine.submit, evaluation)

    def reject(self, evaluation) -> Outcome:
        return _attempt(EvaluationEngine.reject, evaluation)

    def approve(self, evaluation) -> Outcome:
        return _attempt(EvaluationEngine.approve, evaluation, user=self.user)

    # ══════════════════════════════════════════════════════════════
    # WORK ORDERS
    # ══════════════════════════════════════════════════════════════

    def generate(self, evaluation) -> Outcome:
        return _attempt(OrderGenerator.generate, evaluation, user=self.user)

    def update_status(self, order, status) -> Outcome:
        return _attempt(WorkOrderTracker.update_status, order, status)

    def assign_mechanic(self, order, mechanic) -> Outcome:
        return _attempt(WorkOrderTracker.assign_mechanic, order, mechanic)

    def set_order_notes(self, order, notes) -> Outcome:
        return _attempt(WorkOrderTracker.set_notes, order, notes)
