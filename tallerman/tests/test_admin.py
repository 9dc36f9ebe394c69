"""
Smoke tests for the admin registrations.
"""

from decimal import Decimal

import pytest
from django.urls import reverse

from tallerman.services.evaluations import EvaluationEngine
from tallerman.services.ledger import StockLedger


pytestmark = pytest.mark.django_db


@pytest.mark.parametrize('model', [
    'client', 'vehicle', 'product', 'batch', 'stockmove',
    'evaluation', 'workorder', 'externalservice',
])
def test_changelist_renders(admin_client, model, product, customer, vehicle, today):
    StockLedger.receive_batch(product, 3, Decimal('10'), entry_date=today)
    EvaluationEngine.create_draft(customer, vehicle)

    response = admin_client.get(reverse(f'admin:tallerman_{model}_changelist'))

    assert response.status_code == 200


def test_product_change_shows_batches(admin_client, product, today):
    StockLedger.receive_batch(product, 3, Decimal('10'), entry_date=today, code='L-77')

    response = admin_client.get(reverse('admin:tallerman_product_change', args=[product.pk]))

    assert response.status_code == 200
    assert 'L-77' in response.content.decode()
