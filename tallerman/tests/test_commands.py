"""
Tests for the batch_audit management command.
"""

from datetime import timedelta
from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command

from tallerman.services.ledger import StockLedger


pytestmark = pytest.mark.django_db


def run(*args):
    out = StringIO()
    call_command('batch_audit', *args, stdout=out)
    return out.getvalue()


def test_clean_inventory(product, today):
    StockLedger.receive_batch(product, 2, Decimal('1'), entry_date=today)

    assert 'Sin lotes por revisar' in run()


def test_expired_batch_with_stock(product, today, yesterday):
    StockLedger.receive_batch(
        product, 2, Decimal('1'), entry_date=today - timedelta(days=30),
        expiration_date=yesterday, code='VENC-1',
    )

    output = run('--expired')

    assert 'VENCIDO FA-001' in output
    assert 'VENC-1' in output
    assert '1 lote(s)' in output


def test_flagged_batch(product, today):
    batch = StockLedger.receive_batch(product, 2, Decimal('1'), entry_date=today, code='SOB-1')
    StockLedger.correct_batch(batch, 2, 4, Decimal('1'), today, confirm_overstock=True)

    output = run('--flagged')

    assert 'SOBRESTOCK FA-001' in output
    assert 'VENCIDO' not in output
