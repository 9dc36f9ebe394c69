"""
Work orders — generation from approved evaluations and progress tracking.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import transaction

from tallerman.conf import taller_settings
from tallerman.exceptions import TallerError
from tallerman.models.enums import EvaluationStatus, WorkOrderStatus
from tallerman.models.evaluation import Evaluation
from tallerman.models.work_order import WorkOrder, WorkOrderItem
from tallerman.services.base import lock, resolve
from tallerman.services.calendar import BookingCalendar
from tallerman.services.ledger import StockLedger

logger = logging.getLogger('tallerman')


class OrderGenerator:
    """Approved evaluation -> WorkOrder."""

    @classmethod
    def generate(cls, evaluation, user=None) -> WorkOrder:
        """
        Create the work order of an approved evaluation.

        1. Validates the evaluation is APPROVED and has no work order yet
        2. Copies approved items by value (snapshot)
        3. Commits the consumption of approved inventory items and, when
           RESTORE_UNAPPROVED_ON_GENERATE is on, restores the unapproved ones
        4. Releases the slots hired by unapproved items when
           RELEASE_UNAPPROVED_SLOTS_ON_GENERATE is on

        Retrying after a success never creates a second order: the
        Evaluation -> WorkOrder back-reference is checked under the lock.

        Raises:
            TallerError('NOT_APPROVED'): Evaluation is not APPROVED
            TallerError('ALREADY_GENERATED'): data['work_order'] has the existing pk
        """
        with transaction.atomic():
            evaluation = lock(Evaluation, evaluation)

            if evaluation.status != EvaluationStatus.APPROVED:
                raise TallerError(
                    'NOT_APPROVED',
                    evaluation=evaluation.pk,
                    current=evaluation.status,
                )

            existing = WorkOrder.objects.filter(evaluation=evaluation).first()
            if existing is not None:
                raise TallerError(
                    'ALREADY_GENERATED',
                    evaluation=evaluation.pk,
                    work_order=existing.pk,
                )

            order = WorkOrder.objects.create(evaluation=evaluation)
            items = list(evaluation.items.select_related('product').order_by('position'))

            WorkOrderItem.objects.bulk_create([
                WorkOrderItem(
                    work_order=order,
                    position=position,
                    description=item.description,
                    price=item.price,
                    origin=item.origin,
                    quantity=item.quantity,
                    sku=item.product.sku if item.product else '',
                    external_ref=item.external_ref,
                )
                for position, item in enumerate(i for i in items if i.approved)
            ])

            unrestored = cls._settle_consumption(evaluation, items, user)
            if unrestored:
                order.metadata['unrestored'] = unrestored
                order.save(update_fields=['metadata'])

            if taller_settings.RELEASE_UNAPPROVED_SLOTS_ON_GENERATE:
                for item in items:
                    if not item.approved and item.slot_id is not None:
                        BookingCalendar.release_slot(item.slot_id, evaluation)

        logger.info(
            "taller.order.generated",
            extra={"evaluation": evaluation.pk, "work_order": order.pk},
        )
        return order

    @classmethod
    def _settle_consumption(cls, evaluation, items, user) -> list[dict]:
        """Make approved consumption definitive, give back the rest."""
        unrestored = []
        restore_unapproved = taller_settings.RESTORE_UNAPPROVED_ON_GENERATE

        for item in items:
            if not item.has_consumption:
                continue

            if item.approved or not restore_unapproved:
                item.consumption_committed = True
                item.save(update_fields=['consumption_committed'])
                continue

            try:
                StockLedger.restore(
                    item.consumption,
                    reference=evaluation,
                    user=user,
                    reason=f"Ítem no aprobado de evaluación #{evaluation.pk}",
                )
            except TallerError as exc:
                if exc.code != 'BATCH_NOT_FOUND':
                    raise
                logger.warning(
                    "taller.order.restore_failed",
                    extra={
                        "evaluation": evaluation.pk,
                        "position": item.position,
                        "batches": exc.data.get('batches'),
                    },
                )
                unrestored.append({
                    'position': item.position,
                    'consumption': item.consumption,
                    'missing': exc.data.get('batches'),
                })
                item.consumption_committed = True
                item.save(update_fields=['consumption_committed'])
                continue

            item.consumption = []
            item.save(update_fields=['consumption'])

        return unrestored


class WorkOrderTracker:
    """
    Independent partial updates of a work order.

    Statuses may follow each other in any order.
    """

    @classmethod
    def update_status(cls, order, status) -> WorkOrder:
        """
        Raises:
            TallerError('INVALID_STATUS'): If status is not a WorkOrderStatus
        """
        if status not in WorkOrderStatus.values:
            raise TallerError(
                'INVALID_STATUS',
                current=status,
                expected=list(WorkOrderStatus.values),
            )

        with transaction.atomic():
            order = lock(WorkOrder, order)
            previous = order.status
            order.status = status
            order.save(update_fields=['status', 'updated_at'])

        logger.info(
            "taller.order.status",
            extra={"work_order": order.pk, "from": previous, "to": status},
        )
        return order

    @classmethod
    def assign_mechanic(cls, order, mechanic) -> WorkOrder:
        """Assign a mechanic (a user), or unassign with None."""
        if mechanic is not None:
            mechanic = resolve(get_user_model(), mechanic)

        with transaction.atomic():
            order = lock(WorkOrder, order)
            order.mechanic = mechanic
            order.save(update_fields=['mechanic', 'updated_at'])

        logger.info(
            "taller.order.mechanic",
            extra={"work_order": order.pk, "mechanic": getattr(mechanic, 'pk', None)},
        )
        return order

    @classmethod
    def set_notes(cls, order, notes) -> WorkOrder:
        with transaction.atomic():
            order = lock(WorkOrder, order)
            order.internal_notes = notes
            order.save(update_fields=['internal_notes', 'updated_at'])
        return order
