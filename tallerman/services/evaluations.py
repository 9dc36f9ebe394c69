"""
Evaluation engine — diagnostic quotes, their line items and status
transitions.

Every method locks the Evaluation row; stock and slots are only touched
through StockLedger and BookingCalendar.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import NamedTuple

from django.db import transaction
from django.utils import timezone

from tallerman.conf import taller_settings
from tallerman.exceptions import NotFound, TallerError
from tallerman.models.catalog import Client, Product, Vehicle
from tallerman.models.enums import EDITABLE_STATUSES, EvaluationStatus, LineItemOrigin
from tallerman.models.evaluation import Evaluation, LineItem
from tallerman.services.base import lock, resolve
from tallerman.services.calendar import BookingCalendar
from tallerman.services.ledger import StockLedger

logger = logging.getLogger('tallerman')


class Totals(NamedTuple):
    quoted: Decimal
    approved: Decimal


def _check_price(price):
    try:
        value = Decimal(price)
    except (InvalidOperation, TypeError, ValueError):
        raise TallerError('INVALID_PRICE', price=str(price)) from None
    if not value.is_finite() or value < 0:
        raise TallerError('INVALID_PRICE', price=str(price))
    return value


def _lock_editable(evaluation) -> Evaluation:
    evaluation = lock(Evaluation, evaluation)
    if evaluation.status not in EDITABLE_STATUSES:
        raise TallerError(
            'INVALID_STATUS',
            current=evaluation.status,
            expected=list(EDITABLE_STATUSES),
        )
    return evaluation


def _item_at(evaluation, index) -> LineItem:
    try:
        return evaluation.items.get(position=index)
    except LineItem.DoesNotExist:
        raise NotFound('LineItem', index) from None


def _append(evaluation, **fields) -> LineItem:
    position = evaluation.items.count()
    return LineItem.objects.create(evaluation=evaluation, position=position, **fields)


class EvaluationEngine:
    """Evaluation lifecycle and line item editing."""

    # ══════════════════════════════════════════════════════════════
    # CREATION
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def create_draft(cls, client, vehicle, notes='', diagnosis_price=None) -> Evaluation:
        """
        Open a new evaluation for the vehicle, with the reserved diagnosis
        item at index 0.

        Raises:
            TallerError('VEHICLE_BUSY'): The vehicle has a non-rejected evaluation
        """
        if diagnosis_price is None:
            diagnosis_price = taller_settings.DIAGNOSIS_DEFAULT_PRICE
        diagnosis_price = _check_price(diagnosis_price)

        with transaction.atomic():
            vehicle = lock(Vehicle, vehicle)
            client = resolve(Client, client)

            busy = BookingCalendar.vehicle_busy(vehicle)
            if busy is not None:
                raise TallerError(
                    'VEHICLE_BUSY',
                    vehicle=vehicle.plate,
                    conflict_with=busy.pk,
                )

            evaluation = Evaluation.objects.create(
                client=client,
                vehicle=vehicle,
                notes=notes,
            )
            LineItem.objects.create(
                evaluation=evaluation,
                position=0,
                description=taller_settings.DIAGNOSIS_DESCRIPTION,
                price=diagnosis_price,
                origin=LineItemOrigin.DIAGNOSIS,
            )

        logger.info(
            "taller.evaluation.created",
            extra={"evaluation": evaluation.pk, "vehicle": vehicle.plate},
        )
        return evaluation

    # ══════════════════════════════════════════════════════════════
    # LINE ITEMS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def add_manual_item(cls, evaluation, description, price, approved=True) -> LineItem:
        """Append a labor / free text item."""
        price = _check_price(price)

        with transaction.atomic():
            evaluation = _lock_editable(evaluation)
            item = _append(
                evaluation,
                description=description,
                price=price,
                approved=approved,
                origin=LineItemOrigin.MANUAL,
            )

        logger.info(
            "taller.evaluation.item_added",
            extra={"evaluation": evaluation.pk, "position": item.position, "origin": item.origin},
        )
        return item

    @classmethod
    def add_inventory_item(cls, evaluation, product, quantity, price=None,
                           approved=True, user=None) -> LineItem:
        """
        Consume quantity of the product (FIFO) and append an item carrying
        the consumption trace.

        Price defaults to the product sale price times quantity.

        Raises:
            TallerError('INSUFFICIENT_STOCK'): Nothing is consumed nor added
        """
        if price is not None:
            price = _check_price(price)

        with transaction.atomic():
            evaluation = _lock_editable(evaluation)
            product = resolve(Product, product)

            trace = StockLedger.consume(
                product,
                quantity,
                reference=evaluation,
                user=user,
                reason=f"Evaluación #{evaluation.pk}",
            )
            if price is None:
                price = product.price * quantity

            item = _append(
                evaluation,
                description=f"{product.name} x{quantity}",
                price=price,
                approved=approved,
                origin=LineItemOrigin.INVENTORY,
                product=product,
                quantity=quantity,
                consumption=[entry.as_dict() for entry in trace],
            )

        logger.info(
            "taller.evaluation.item_added",
            extra={
                "evaluation": evaluation.pk,
                "position": item.position,
                "origin": item.origin,
                "product": product.sku,
                "qty": str(quantity),
            },
        )
        return item

    @classmethod
    def add_external_item(cls, evaluation, external_ref, price, description='',
                          approved=True) -> LineItem:
        """
        Append an item provided by another workshop. Stock and schedule of
        the provider are not touched.
        """
        price = _check_price(price)

        with transaction.atomic():
            evaluation = _lock_editable(evaluation)
            item = _append(
                evaluation,
                description=description or f"Servicio externo {external_ref}",
                price=price,
                approved=approved,
                origin=LineItemOrigin.EXTERNAL,
                external_ref=str(external_ref),
            )

        logger.info(
            "taller.evaluation.item_added",
            extra={"evaluation": evaluation.pk, "position": item.position, "origin": item.origin},
        )
        return item

    @classmethod
    def hire_external_service(cls, evaluation, slot, approved=True, user=None) -> LineItem:
        """
        Book an available slot of an external service and append it as an
        external item priced at the service price. The booking starts as a
        pending request made by user.

        Raises:
            TallerError('SERVICE_UNAVAILABLE'), TallerError('SLOT_BOOKED')
        """
        with transaction.atomic():
            evaluation = _lock_editable(evaluation)
            slot = BookingCalendar.book_slot(slot, evaluation, requester=user)
            service = slot.service

            item = _append(
                evaluation,
                description=f"{service.title} ({timezone.localtime(slot.start):%d/%m %H:%M})",
                price=service.price,
                approved=approved,
                origin=LineItemOrigin.EXTERNAL,
                external_ref=f"service:{service.pk}",
                external_service=service,
                slot=slot,
            )

        logger.info(
            "taller.evaluation.service_hired",
            extra={"evaluation": evaluation.pk, "slot": slot.pk, "service": service.pk},
        )
        return item

    @classmethod
    def remove_item(cls, evaluation, index, user=None) -> None:
        """
        Remove the item at index and renumber the following ones.

        Inventory consumed by the item is restored first; a hired slot is
        released back to available.

        Raises:
            TallerError('DIAGNOSIS_LOCKED'): For the diagnosis item
            TallerError('BATCH_NOT_FOUND'): A consumed batch was deleted,
                the item is kept
        """
        with transaction.atomic():
            evaluation = _lock_editable(evaluation)
            item = _item_at(evaluation, index)

            if item.is_diagnosis or index == 0:
                raise TallerError('DIAGNOSIS_LOCKED', evaluation=evaluation.pk)

            if item.has_consumption:
                StockLedger.restore(
                    item.consumption,
                    reference=evaluation,
                    user=user,
                    reason=f"Ítem eliminado de evaluación #{evaluation.pk}",
                )
            if item.slot_id is not None:
                BookingCalendar.release_slot(item.slot_id, evaluation)

            item.delete()
            # one row at a time, ascending, so positions stay unique
            for following in evaluation.items.filter(position__gt=index).order_by('position'):
                following.position -= 1
                following.save(update_fields=['position'])

        logger.info(
            "taller.evaluation.item_removed",
            extra={"evaluation": evaluation.pk, "position": index},
        )

    @classmethod
    def reprice_item(cls, evaluation, index, price) -> LineItem:
        """Change the price of any item, the diagnosis item included."""
        price = _check_price(price)

        with transaction.atomic():
            evaluation = _lock_editable(evaluation)
            item = _item_at(evaluation, index)
            item.price = price
            item.save(update_fields=['price'])
        return item

    @classmethod
    def set_approval(cls, evaluation, index, approved) -> LineItem:
        """Toggle the approved flag of an item. The evaluation status is unchanged."""
        with transaction.atomic():
            evaluation = _lock_editable(evaluation)
            item = _item_at(evaluation, index)
            item.approved = bool(approved)
            item.save(update_fields=['approved'])
        return item

    @classmethod
    def set_notes(cls, evaluation, notes) -> Evaluation:
        with transaction.atomic():
            evaluation = _lock_editable(evaluation)
            evaluation.notes = notes
            evaluation.save(update_fields=['notes', 'updated_at'])
        return evaluation

    @classmethod
    def compute_totals(cls, evaluation) -> Totals:
        """(total quoted, total approved)."""
        evaluation = resolve(Evaluation, evaluation)
        quoted = Decimal('0')
        approved = Decimal('0')
        for item in evaluation.items.all():
            quoted += item.price
            if item.approved:
                approved += item.price
        return Totals(quoted, approved)

    # ══════════════════════════════════════════════════════════════
    # TRANSITIONS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _transition(cls, evaluation, allowed_from, target) -> Evaluation:
        evaluation = lock(Evaluation, evaluation)
        if evaluation.status not in allowed_from:
            raise TallerError(
                'INVALID_STATUS',
                current=evaluation.status,
                expected=list(allowed_from),
            )

        previous = evaluation.status
        evaluation.status = target
        now = timezone.now()
        if target == EvaluationStatus.SENT:
            evaluation.sent_at = now
        else:
            evaluation.resolved_at = now
        evaluation.save(update_fields=['status', 'sent_at', 'resolved_at', 'updated_at'])

        logger.info(
            "taller.evaluation.transition",
            extra={"evaluation": evaluation.pk, "from": previous, "to": target},
        )
        return evaluation

    @classmethod
    def submit(cls, evaluation) -> Evaluation:
        """Transition: DRAFT -> SENT"""
        with transaction.atomic():
            return cls._transition(evaluation, [EvaluationStatus.DRAFT], EvaluationStatus.SENT)

    @classmethod
    def reject(cls, evaluation) -> Evaluation:
        """
        Transition: DRAFT|SENT -> REJECTED

        Parts already consumed stay consumed: they are presumed physically
        used or ordered. Hired slots go back to available.
        """
        with transaction.atomic():
            evaluation = cls._transition(
                evaluation,
                [EvaluationStatus.DRAFT, EvaluationStatus.SENT],
                EvaluationStatus.REJECTED,
            )
            for slot_id in evaluation.items.exclude(slot=None).values_list('slot_id', flat=True):
                BookingCalendar.release_slot(slot_id, evaluation)
        return evaluation

    @classmethod
    def approve(cls, evaluation, user=None):
        """
        Transition: SENT -> APPROVED, then generate the work order in the
        same transaction.

        Returns:
            The generated WorkOrder
        """
        from tallerman.services.orders import OrderGenerator

        with transaction.atomic():
            evaluation = cls._transition(
                evaluation,
                [EvaluationStatus.SENT],
                EvaluationStatus.APPROVED,
            )
            return OrderGenerator.generate(evaluation, user=user)
