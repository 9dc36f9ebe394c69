"""
Stock ledger — batch receipt, FIFO consumption, restoration and
administrative corrections.

All methods use transaction.atomic() and lock the Product row first, so
concurrent operations on the same product are serialized while other
products proceed independently.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Sum
from django.db.models.functions import Coalesce

from tallerman.exceptions import TallerError
from tallerman.models.batch import Batch
from tallerman.models.catalog import Product
from tallerman.models.move import StockMove
from tallerman.services.base import lock, resolve

logger = logging.getLogger('tallerman')


@dataclass(frozen=True)
class ConsumptionEntry:
    """Quantity taken from one batch by a consume() call."""

    batch: int
    quantity: int

    def as_dict(self) -> dict:
        return {'batch': self.batch, 'quantity': self.quantity}

    @classmethod
    def coerce(cls, value) -> 'ConsumptionEntry':
        """Accept an entry or its JSON form (as stored on LineItem.consumption)."""
        if isinstance(value, cls):
            return value
        return cls(batch=int(value['batch']), quantity=int(value['quantity']))


def _check_quantity(quantity, allow_zero=False):
    if not isinstance(quantity, int) or isinstance(quantity, bool):
        raise TallerError('INVALID_QUANTITY', requested=quantity)
    if quantity < 0 or (quantity == 0 and not allow_zero):
        raise TallerError('INVALID_QUANTITY', requested=quantity)


def _check_cost(unit_cost):
    try:
        value = Decimal(unit_cost)
    except (InvalidOperation, TypeError, ValueError):
        raise TallerError('INVALID_PRICE', unit_cost=str(unit_cost)) from None
    if not value.is_finite() or value < 0:
        raise TallerError('INVALID_PRICE', unit_cost=str(unit_cost))
    return value


def _record(batch, delta, reason, reference=None, user=None, **metadata):
    StockMove.objects.create(
        product_id=batch.product_id,
        batch=batch,
        batch_ref=batch.pk,
        delta=delta,
        reference=reference,
        reason=reason,
        user=user,
        metadata=metadata,
    )


class StockLedger:
    """Only component allowed to mutate Batch rows."""

    @classmethod
    def available_quantity(cls, product) -> int:
        """Sum of current_quantity over all batches of the product."""
        product = resolve(Product, product)
        return Batch.objects.filter(product=product).aggregate(
            t=Coalesce(Sum('current_quantity'), 0)
        )['t']

    @classmethod
    def receive_batch(cls, product, quantity, unit_cost, entry_date=None,
                      expiration_date=None, code='', supplier='',
                      reference=None, user=None, reason='Ingreso de lote'):
        """
        Stock entry: creates a new batch with
        current_quantity == initial_quantity == quantity.

        Raises:
            TallerError('INVALID_QUANTITY'): If quantity <= 0
            TallerError('INVALID_PRICE'): If unit_cost < 0
        """
        _check_quantity(quantity)
        unit_cost = _check_cost(unit_cost)

        with transaction.atomic():
            product = lock(Product, product)
            batch = Batch.objects.create(
                product=product,
                code=code,
                supplier=supplier,
                initial_quantity=quantity,
                current_quantity=quantity,
                unit_cost=unit_cost,
                entry_date=entry_date or date.today(),
                expiration_date=expiration_date,
            )
            _record(batch, quantity, reason, reference, user)

        logger.info(
            "taller.ledger.receive",
            extra={
                "product": product.sku,
                "batch": batch.pk,
                "qty": str(quantity),
                "unit_cost": str(unit_cost),
            },
        )
        return batch

    @classmethod
    def consume(cls, product, quantity, reference=None, user=None,
                reason='Consumo') -> list[ConsumptionEntry]:
        """
        Take quantity from the product's batches, oldest entry_date first
        (ties broken by creation order).

        All-or-nothing: when the product has less than quantity in stock no
        batch is touched.

        Returns:
            Consumption trace, one entry per touched batch, for restore()

        Raises:
            TallerError('INVALID_QUANTITY'): If quantity <= 0
            TallerError('INSUFFICIENT_STOCK'): If available < quantity
        """
        _check_quantity(quantity)

        with transaction.atomic():
            product = lock(Product, product)
            batches = list(
                Batch.objects.select_for_update()
                .filter(product=product, current_quantity__gt=0)
                .fifo()
            )
            available = sum(b.current_quantity for b in batches)

            if available < quantity:
                raise TallerError(
                    'INSUFFICIENT_STOCK',
                    product=product.sku,
                    available=available,
                    requested=quantity,
                )

            trace = []
            remaining = quantity
            for batch in batches:
                if remaining == 0:
                    break
                taken = min(batch.current_quantity, remaining)
                batch.current_quantity -= taken
                batch.save(update_fields=['current_quantity', 'updated_at'])
                _record(batch, -taken, reason, reference, user)
                trace.append(ConsumptionEntry(batch=batch.pk, quantity=taken))
                remaining -= taken

        logger.info(
            "taller.ledger.consume",
            extra={
                "product": product.sku,
                "qty": str(quantity),
                "batches": [e.batch for e in trace],
            },
        )
        return trace

    @classmethod
    def restore(cls, trace, reference=None, user=None, reason='Restitución'):
        """
        Reverse a consume() by adding back the exact quantities to the exact
        batches.

        All-or-nothing: if any batch of the trace was deleted nothing is
        restored.

        Raises:
            TallerError('BATCH_NOT_FOUND'): data['batches'] lists the missing ids
        """
        entries = [ConsumptionEntry.coerce(e) for e in trace]
        if not entries:
            return []

        batch_ids = sorted({e.batch for e in entries})

        with transaction.atomic():
            product_ids = sorted(set(
                Batch.objects.filter(pk__in=batch_ids)
                .values_list('product_id', flat=True)
            ))
            # Same lock order as consume(): products, then batches
            list(Product.objects.select_for_update().filter(pk__in=product_ids).order_by('pk'))
            batches = Batch.objects.select_for_update().in_bulk(batch_ids)

            missing = [pk for pk in batch_ids if pk not in batches]
            if missing:
                raise TallerError('BATCH_NOT_FOUND', batches=missing)

            for entry in entries:
                batch = batches[entry.batch]
                batch.current_quantity += entry.quantity
                batch.save(update_fields=['current_quantity', 'updated_at'])
                _record(batch, entry.quantity, reason, reference, user)

        logger.info(
            "taller.ledger.restore",
            extra={"batches": batch_ids, "qty": str(sum(e.quantity for e in entries))},
        )
        return entries

    @classmethod
    def correct_batch(cls, batch, initial_quantity, current_quantity, unit_cost,
                      entry_date, expiration_date=None, confirm_overstock=False,
                      user=None, reason='Corrección manual'):
        """
        Administrative override of every batch field.

        A current_quantity above initial_quantity is only accepted with
        confirm_overstock=True, and leaves the batch flagged.

        Raises:
            TallerError('INVALID_QUANTITY'): If a quantity is negative
            TallerError('INVALID_PRICE'): If unit_cost < 0
            TallerError('INCONSISTENT_CORRECTION'): Overstock without confirmation
        """
        _check_quantity(initial_quantity, allow_zero=True)
        _check_quantity(current_quantity, allow_zero=True)
        unit_cost = _check_cost(unit_cost)

        overstock = current_quantity > initial_quantity
        if overstock and not confirm_overstock:
            raise TallerError(
                'INCONSISTENT_CORRECTION',
                initial=initial_quantity,
                current=current_quantity,
            )

        with transaction.atomic():
            product_id = resolve(Batch, batch).product_id
            lock(Product, product_id)
            batch = lock(Batch, batch)

            delta = current_quantity - batch.current_quantity
            batch.initial_quantity = initial_quantity
            batch.current_quantity = current_quantity
            batch.unit_cost = unit_cost
            batch.entry_date = entry_date
            batch.expiration_date = expiration_date
            batch.overstock_confirmed = overstock
            batch.save()

            if delta:
                _record(batch, delta, reason, user=user, correction=True)

        logger.info(
            "taller.ledger.correct",
            extra={
                "batch": batch.pk,
                "delta": str(delta),
                "overstock": overstock,
            },
        )
        return batch

    @classmethod
    def delete_batch(cls, batch, user=None, reason='Lote eliminado') -> int:
        """
        Remove a batch; total stock drops by its current_quantity.

        Traces pointing at the batch become unrestorable (restore() reports
        BATCH_NOT_FOUND for them).

        Returns:
            Quantity removed from stock
        """
        with transaction.atomic():
            product_id = resolve(Batch, batch).product_id
            lock(Product, product_id)
            batch = lock(Batch, batch)
            removed = batch.current_quantity
            batch_id = batch.pk

            if removed:
                _record(batch, -removed, reason, user=user, deleted=True)
            batch.delete()

        logger.info(
            "taller.ledger.delete",
            extra={"batch": batch_id, "removed": str(removed)},
        )
        return removed
