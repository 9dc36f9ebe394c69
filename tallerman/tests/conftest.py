"""
Pytest fixtures for Tallerman tests.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from tallerman.models import Client, ExternalService, Product, Vehicle


User = get_user_model()


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='mecanico',
        password='testpass123'
    )


@pytest.fixture
def provider(db):
    """Owner of the external services (another workshop)."""
    return User.objects.create_user(
        username='alineaciones',
        password='testpass123'
    )


@pytest.fixture
def customer(db):
    """Create a workshop customer."""
    return Client.objects.create(
        first_name='Ana',
        last_name='Rojas',
        phone='+56911112222',
    )


@pytest.fixture
def vehicle(db, customer):
    """Vehicle of the test client."""
    return Vehicle.objects.create(
        client=customer,
        brand='Toyota',
        model='Yaris',
        plate='ABCD12',
        year=2018,
    )


@pytest.fixture
def other_vehicle(db, customer):
    return Vehicle.objects.create(
        client=customer,
        brand='Suzuki',
        model='Swift',
        plate='WXYZ98',
    )


@pytest.fixture
def product(db):
    """Oil filter priced at 100 per unit."""
    return Product.objects.create(
        name='Filtro de aceite',
        sku='FA-001',
        category='Filtros',
        location='Estante A',
        price=Decimal('100.00'),
    )


@pytest.fixture
def other_product(db):
    return Product.objects.create(
        name='Pastillas de freno',
        sku='PF-002',
        price=Decimal('250.00'),
    )


@pytest.fixture
def service(db, provider):
    """External alignment service."""
    return ExternalService.objects.create(
        owner=provider,
        title='Alineación',
        category='Suspensión',
        price=Decimal('80.00'),
        duration_minutes=60,
    )


@pytest.fixture
def today():
    """Return today's date."""
    return date.today()


@pytest.fixture
def yesterday():
    return date.today() - timedelta(days=1)


@pytest.fixture
def morning():
    """Tomorrow at 09:00, aware."""
    tomorrow = date.today() + timedelta(days=1)
    return timezone.make_aware(datetime(tomorrow.year, tomorrow.month, tomorrow.day, 9, 0))


@pytest.fixture
def hour():
    return timedelta(hours=1)
