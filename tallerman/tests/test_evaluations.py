"""
Tests for EvaluationEngine (line items, totals and status transitions).
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction

from tallerman.exceptions import TallerError
from tallerman.models import (
    Evaluation,
    EvaluationStatus,
    LineItem,
    LineItemOrigin,
    RequestStatus,
    Slot,
    SlotKind,
)
from tallerman.services.calendar import BookingCalendar
from tallerman.services.evaluations import EvaluationEngine, Totals
from tallerman.services.ledger import StockLedger


pytestmark = pytest.mark.django_db


@pytest.fixture
def stocked(product, today):
    """Product with B1 (5 units, older) and B2 (3 units)."""
    b1 = StockLedger.receive_batch(product, 5, Decimal('10'), entry_date=today - timedelta(days=2))
    b2 = StockLedger.receive_batch(product, 3, Decimal('10'), entry_date=today - timedelta(days=1))
    return b1, b2


@pytest.fixture
def draft(customer, vehicle):
    return EvaluationEngine.create_draft(customer, vehicle, diagnosis_price=Decimal('50'))


class TestCreateDraft:

    def test_draft_has_diagnosis_item(self, draft):
        assert draft.status == EvaluationStatus.DRAFT
        items = list(draft.items.all())
        assert len(items) == 1
        assert items[0].position == 0
        assert items[0].origin == LineItemOrigin.DIAGNOSIS
        assert items[0].description == 'Diagnóstico'
        assert items[0].price == Decimal('50')
        assert items[0].approved is True

    def test_default_diagnosis_price(self, customer, vehicle):
        evaluation = EvaluationEngine.create_draft(customer, vehicle)

        assert evaluation.items.get(position=0).price == Decimal('0')

    def test_diagnosis_from_settings(self, settings, customer, vehicle):
        settings.TALLERMAN = {
            'DIAGNOSIS_DESCRIPTION': 'Revisión general',
            'DIAGNOSIS_DEFAULT_PRICE': Decimal('15000'),
        }

        item = EvaluationEngine.create_draft(customer, vehicle).items.get(position=0)

        assert item.description == 'Revisión general'
        assert item.price == Decimal('15000')

    def test_vehicle_busy_while_not_rejected(self, draft, customer, vehicle):
        with pytest.raises(TallerError) as exc:
            EvaluationEngine.create_draft(customer, vehicle)

        assert exc.value.code == 'VEHICLE_BUSY'
        assert exc.value.conflict_with == draft.pk

        EvaluationEngine.submit(draft)
        with pytest.raises(TallerError):
            EvaluationEngine.create_draft(customer, vehicle)

        EvaluationEngine.reject(draft)
        second = EvaluationEngine.create_draft(customer, vehicle)
        assert second.pk != draft.pk

    def test_approved_evaluation_keeps_vehicle_busy(self, draft, customer, vehicle):
        EvaluationEngine.submit(draft)
        EvaluationEngine.approve(draft)

        assert BookingCalendar.vehicle_busy(vehicle).pk == draft.pk
        with pytest.raises(TallerError) as exc:
            EvaluationEngine.create_draft(customer, vehicle)
        assert exc.value.code == 'VEHICLE_BUSY'

    def test_other_vehicle_is_free(self, draft, customer, other_vehicle):
        evaluation = EvaluationEngine.create_draft(customer, other_vehicle)

        assert evaluation.vehicle == other_vehicle


class TestLineItems:

    def test_manual_item_appended(self, draft):
        item = EvaluationEngine.add_manual_item(draft, 'Cambio de aceite', Decimal('200'))

        assert item.position == 1
        assert item.origin == LineItemOrigin.MANUAL

    def test_negative_price_rejected(self, draft):
        with pytest.raises(TallerError) as exc:
            EvaluationEngine.add_manual_item(draft, 'Mano de obra', Decimal('-1'))

        assert exc.value.code == 'INVALID_PRICE'
        assert draft.items.count() == 1

    @pytest.mark.parametrize('price', ['abc', None, 'NaN', object()])
    def test_non_numeric_price_rejected(self, draft, price):
        with pytest.raises(TallerError) as exc:
            EvaluationEngine.add_manual_item(draft, 'Mano de obra', price)

        assert exc.value.code == 'INVALID_PRICE'
        assert draft.items.count() == 1

    def test_reprice_with_text_is_invalid(self, draft):
        with pytest.raises(TallerError) as exc:
            EvaluationEngine.reprice_item(draft, 0, 'gratis')

        assert exc.value.code == 'INVALID_PRICE'
        assert draft.items.get(position=0).price == Decimal('50')

    def test_inventory_item_consumes_fifo(self, draft, product, stocked):
        b1, b2 = stocked

        item = EvaluationEngine.add_inventory_item(draft, product, 6)

        assert item.origin == LineItemOrigin.INVENTORY
        assert item.quantity == 6
        assert item.price == Decimal('600')
        assert item.description == 'Filtro de aceite x6'
        assert item.consumption == [
            {'batch': b1.pk, 'quantity': 5},
            {'batch': b2.pk, 'quantity': 1},
        ]
        assert StockLedger.available_quantity(product) == 2

    def test_inventory_item_explicit_price(self, draft, product, stocked):
        item = EvaluationEngine.add_inventory_item(draft, product, 1, price=Decimal('90'))

        assert item.price == Decimal('90')

    def test_insufficient_stock_adds_nothing(self, draft, product, stocked):
        with pytest.raises(TallerError) as exc:
            EvaluationEngine.add_inventory_item(draft, product, 9)

        assert exc.value.code == 'INSUFFICIENT_STOCK'
        assert draft.items.count() == 1
        assert StockLedger.available_quantity(product) == 8

    def test_external_item(self, draft, product, stocked):
        item = EvaluationEngine.add_external_item(draft, 'TALLER-7', Decimal('120'), description='Rectificado')

        assert item.origin == LineItemOrigin.EXTERNAL
        assert item.external_ref == 'TALLER-7'
        assert StockLedger.available_quantity(product) == 8

    def test_remove_inventory_item_restores_stock(self, draft, product, stocked):
        b1, b2 = stocked
        EvaluationEngine.add_manual_item(draft, 'Mano de obra', Decimal('100'))
        EvaluationEngine.add_inventory_item(draft, product, 6)
        EvaluationEngine.add_manual_item(draft, 'Lavado', Decimal('30'))

        EvaluationEngine.remove_item(draft, 2)

        b1.refresh_from_db()
        b2.refresh_from_db()
        assert (b1.current_quantity, b2.current_quantity) == (5, 3)
        positions = list(draft.items.values_list('position', 'description'))
        assert positions == [(0, 'Diagnóstico'), (1, 'Mano de obra'), (2, 'Lavado')]

    def test_remove_middle_item_renumbers_all_following(self, draft):
        for name in ['Aceite', 'Filtro', 'Frenos', 'Lavado', 'Alineación']:
            EvaluationEngine.add_manual_item(draft, name, Decimal('10'))

        EvaluationEngine.remove_item(draft, 2)

        positions = list(draft.items.values_list('position', 'description'))
        assert positions == [
            (0, 'Diagnóstico'), (1, 'Aceite'), (2, 'Frenos'), (3, 'Lavado'), (4, 'Alineación'),
        ]
        item = EvaluationEngine.add_manual_item(draft, 'Extra', Decimal('5'))
        assert item.position == 5

    def test_duplicate_position_is_refused_by_database(self, draft):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                LineItem.objects.create(evaluation=draft, position=0, description='Copia', price=1)

        assert draft.items.count() == 1

    def test_remove_diagnosis_is_locked(self, draft):
        with pytest.raises(TallerError) as exc:
            EvaluationEngine.remove_item(draft, 0)

        assert exc.value.code == 'DIAGNOSIS_LOCKED'
        assert draft.items.count() == 1

    def test_remove_missing_index(self, draft):
        with pytest.raises(TallerError) as exc:
            EvaluationEngine.remove_item(draft, 7)

        assert exc.value.code == 'NOT_FOUND'

    def test_remove_item_with_deleted_batch_keeps_item(self, draft, product, stocked):
        b1, _ = stocked
        EvaluationEngine.add_inventory_item(draft, product, 6)
        StockLedger.delete_batch(b1)

        with pytest.raises(TallerError) as exc:
            EvaluationEngine.remove_item(draft, 1)

        assert exc.value.code == 'BATCH_NOT_FOUND'
        assert draft.items.count() == 2

    def test_diagnosis_can_be_repriced(self, draft):
        item = EvaluationEngine.reprice_item(draft, 0, Decimal('75'))

        assert item.price == Decimal('75')

    def test_set_approval_keeps_status(self, draft):
        EvaluationEngine.add_manual_item(draft, 'Pintura', Decimal('500'))

        item = EvaluationEngine.set_approval(draft, 1, False)

        assert item.approved is False
        draft.refresh_from_db()
        assert draft.status == EvaluationStatus.DRAFT

    def test_sent_evaluation_is_still_editable(self, draft):
        EvaluationEngine.submit(draft)

        item = EvaluationEngine.add_manual_item(draft, 'Extra', Decimal('10'))

        assert item.position == 1

    def test_rejected_evaluation_is_frozen(self, draft):
        EvaluationEngine.reject(draft)

        with pytest.raises(TallerError) as exc:
            EvaluationEngine.add_manual_item(draft, 'Extra', Decimal('10'))

        assert exc.value.code == 'INVALID_STATUS'

    def test_set_notes(self, draft):
        evaluation = EvaluationEngine.set_notes(draft, 'Ruido en suspensión')

        assert evaluation.notes == 'Ruido en suspensión'


class TestHireExternalService:

    def test_hire_books_slot(self, draft, service, morning, hour):
        slot = BookingCalendar.commit_slot(service, morning, morning + hour)

        item = EvaluationEngine.hire_external_service(draft, slot)

        slot.refresh_from_db()
        assert slot.kind == SlotKind.BOOKED
        assert slot.evaluation == draft
        assert item.price == service.price
        assert item.external_ref == f"service:{service.pk}"
        assert item.slot == slot

    def test_removing_hired_item_releases_slot(self, draft, service, morning, hour):
        slot = BookingCalendar.commit_slot(service, morning, morning + hour)
        EvaluationEngine.hire_external_service(draft, slot)

        EvaluationEngine.remove_item(draft, 1)

        slot.refresh_from_db()
        assert slot.kind == SlotKind.AVAILABLE
        assert slot.evaluation is None

    def test_hire_opens_pending_request(self, draft, service, user, morning, hour):
        slot = BookingCalendar.commit_slot(service, morning, morning + hour)

        EvaluationEngine.hire_external_service(draft, slot, user=user)

        slot.refresh_from_db()
        assert slot.request_status == RequestStatus.PENDING
        assert slot.requested_by == user
        assert list(BookingCalendar.requests_sent(user)) == [slot]

    def test_rejecting_evaluation_releases_hired_slot(self, draft, service, morning, hour):
        slot = BookingCalendar.commit_slot(service, morning, morning + hour)
        EvaluationEngine.hire_external_service(draft, slot)

        EvaluationEngine.reject(draft)

        slot.refresh_from_db()
        assert slot.kind == SlotKind.AVAILABLE
        assert slot.evaluation is None
        BookingCalendar.remove_slot(slot)
        assert not Slot.objects.filter(pk=slot.pk).exists()

    def test_removing_item_keeps_slot_rebooked_by_someone_else(
        self, draft, service, provider, customer, other_vehicle, morning, hour,
    ):
        slot = BookingCalendar.commit_slot(service, morning, morning + hour)
        EvaluationEngine.hire_external_service(draft, slot)
        BookingCalendar.respond_request(slot, RequestStatus.REJECTED, user=provider)
        other = EvaluationEngine.create_draft(customer, other_vehicle)
        EvaluationEngine.hire_external_service(other, slot)

        EvaluationEngine.remove_item(draft, 1)

        slot.refresh_from_db()
        assert slot.kind == SlotKind.BOOKED
        assert slot.evaluation == other

    def test_booked_slot_cannot_be_hired_twice(self, draft, service, morning, hour):
        slot = BookingCalendar.commit_slot(service, morning, morning + hour)
        EvaluationEngine.hire_external_service(draft, slot)

        with pytest.raises(TallerError) as exc:
            EvaluationEngine.hire_external_service(draft, slot)

        assert exc.value.code == 'SLOT_BOOKED'
        assert draft.items.count() == 2


class TestTotals:

    def test_quoted_and_approved(self, customer, vehicle):
        evaluation = EvaluationEngine.create_draft(customer, vehicle, diagnosis_price=Decimal('100'))
        EvaluationEngine.add_manual_item(evaluation, 'Frenos', Decimal('200'))
        EvaluationEngine.add_manual_item(evaluation, 'Pulido', Decimal('50'), approved=False)

        totals = EvaluationEngine.compute_totals(evaluation)

        assert totals == Totals(Decimal('350'), Decimal('300'))
        assert evaluation.total_quoted == Decimal('350')
        assert evaluation.total_approved == Decimal('300')


class TestTransitions:

    def test_submit_sets_sent_at(self, draft):
        evaluation = EvaluationEngine.submit(draft)

        assert evaluation.status == EvaluationStatus.SENT
        assert evaluation.sent_at is not None

    def test_submit_twice_is_invalid(self, draft):
        EvaluationEngine.submit(draft)

        with pytest.raises(TallerError) as exc:
            EvaluationEngine.submit(draft)

        assert exc.value.code == 'INVALID_STATUS'

    def test_approve_requires_sent(self, draft):
        with pytest.raises(TallerError) as exc:
            EvaluationEngine.approve(draft)

        assert exc.value.code == 'INVALID_STATUS'
        draft.refresh_from_db()
        assert draft.status == EvaluationStatus.DRAFT

    def test_reject_from_draft(self, draft):
        evaluation = EvaluationEngine.reject(draft)

        assert evaluation.status == EvaluationStatus.REJECTED
        assert evaluation.resolved_at is not None

    def test_rejected_is_terminal(self, draft):
        EvaluationEngine.reject(draft)

        for transition in (EvaluationEngine.submit, EvaluationEngine.approve, EvaluationEngine.reject):
            with pytest.raises(TallerError):
                transition(draft)

        assert Evaluation.objects.get(pk=draft.pk).status == EvaluationStatus.REJECTED

    def test_reject_keeps_consumed_stock(self, draft, product, stocked):
        EvaluationEngine.add_inventory_item(draft, product, 6)

        EvaluationEngine.reject(draft)

        assert StockLedger.available_quantity(product) == 2

    def test_approve_generates_work_order(self, draft):
        EvaluationEngine.submit(draft)

        order = EvaluationEngine.approve(draft)

        draft.refresh_from_db()
        assert draft.status == EvaluationStatus.APPROVED
        assert order.evaluation_id == draft.pk
