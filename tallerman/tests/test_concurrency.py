"""
Concurrent callers against a file-backed database.

Each worker runs in its own thread with its own connection, so the
transactions really race instead of sharing the test transaction.
"""

import threading
from datetime import timedelta
from decimal import Decimal

import pytest
from django.db import connection

from tallerman.exceptions import TallerError
from tallerman.models import Batch, Slot
from tallerman.services.calendar import BookingCalendar
from tallerman.services.ledger import StockLedger


pytestmark = pytest.mark.django_db(transaction=True)


def _race(*calls):
    """Run every call at the same time; return (results, errors)."""
    barrier = threading.Barrier(len(calls))
    results, errors = [], []
    guard = threading.Lock()

    def worker(call):
        try:
            barrier.wait(timeout=10)
            value = call()
        except TallerError as exc:
            with guard:
                errors.append(exc)
        else:
            with guard:
                results.append(value)
        finally:
            connection.close()

    threads = [threading.Thread(target=worker, args=(call,)) for call in calls]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return results, errors


class TestConcurrentConsume:

    def test_only_one_caller_gets_the_last_units(self, product, today):
        StockLedger.receive_batch(product, 5, Decimal('10'), entry_date=today - timedelta(days=1))
        StockLedger.receive_batch(product, 3, Decimal('10'), entry_date=today)

        results, errors = _race(
            lambda: StockLedger.consume(product.pk, 5),
            lambda: StockLedger.consume(product.pk, 5),
        )

        assert len(results) == 1
        assert [e.code for e in errors] == ['INSUFFICIENT_STOCK']
        assert errors[0].available == 3
        quantities = list(Batch.objects.filter(product=product).values_list('current_quantity', flat=True))
        assert all(q >= 0 for q in quantities)
        assert StockLedger.available_quantity(product) == 3

    def test_small_requests_all_fit(self, product, today):
        StockLedger.receive_batch(product, 8, Decimal('10'), entry_date=today)

        results, errors = _race(*[lambda: StockLedger.consume(product.pk, 2) for _ in range(4)])

        assert len(results) == 4
        assert errors == []
        assert StockLedger.available_quantity(product) == 0


class TestConcurrentCommitSlot:

    def test_overlapping_windows_commit_once(self, service, morning, hour):
        results, errors = _race(
            lambda: BookingCalendar.commit_slot(service.pk, morning, morning + hour),
            lambda: BookingCalendar.commit_slot(service.pk, morning + hour / 2, morning + hour * 2),
        )

        assert len(results) == 1
        assert [e.code for e in errors] == ['SLOT_CONFLICT']
        assert errors[0].conflict_with == results[0].pk
        assert Slot.objects.count() == 1

    def test_double_booking_race(self, service, morning, hour):
        slot = BookingCalendar.commit_slot(service, morning, morning + hour)

        results, errors = _race(
            lambda: BookingCalendar.book_slot(slot.pk),
            lambda: BookingCalendar.book_slot(slot.pk),
        )

        assert len(results) == 1
        assert [e.code for e in errors] == ['SLOT_BOOKED']
