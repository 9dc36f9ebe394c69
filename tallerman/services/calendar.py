"""
Booking calendar — overlap-free time windows per external service, and the
status-based occupancy of vehicles.

Mutations lock the ExternalService row (the resource key) and re-validate
against every other slot of that service.
"""

import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from tallerman.exceptions import TallerError
from tallerman.models.calendar import ExternalService, Slot
from tallerman.models.enums import REQUEST_TRANSITIONS, RequestStatus, SlotKind
from tallerman.models.evaluation import Evaluation
from tallerman.occupancy import INTERVALS, VEHICLE_STATUS, Interval, find_conflict
from tallerman.services.base import lock, resolve

logger = logging.getLogger('tallerman')


@dataclass(frozen=True)
class SlotProposal:
    """Answer of propose_slot(): accepted, or the pk of the blocking slot."""

    accepted: bool
    conflict_with: int | None = None


def _interval(start, end) -> Interval:
    interval = Interval(start, end)
    if start is None or end is None or not interval.is_valid:
        raise TallerError('INVALID_INTERVAL', start=str(start), end=str(end))
    return interval


def _conflict(service, interval, exclude=None):
    return find_conflict(
        INTERVALS,
        interval,
        Slot.objects.for_service(service).order_by('start'),
        exclude=exclude,
    )


class BookingCalendar:
    """Slot validation and mutation for external services."""

    @classmethod
    def propose_slot(cls, service, start, end, exclude_slot=None) -> SlotProposal:
        """
        Check a candidate window without writing anything.

        Rejected when any slot of the service other than exclude_slot
        satisfies start < slot.end and slot.start < end.

        Raises:
            TallerError('INVALID_INTERVAL'): If end <= start
        """
        interval = _interval(start, end)
        service = resolve(ExternalService, service)
        blocking = _conflict(service, interval, exclude=exclude_slot)
        if blocking is not None:
            return SlotProposal(accepted=False, conflict_with=blocking.pk)
        return SlotProposal(accepted=True)

    @classmethod
    def commit_slot(cls, service, start, end, title='') -> Slot:
        """
        Publish an available window.

        Raises:
            TallerError('INVALID_INTERVAL'): If end <= start
            TallerError('SLOT_CONFLICT'): If it overlaps another slot
        """
        interval = _interval(start, end)

        with transaction.atomic():
            service = lock(ExternalService, service)
            blocking = _conflict(service, interval)
            if blocking is not None:
                raise TallerError('SLOT_CONFLICT', conflict_with=blocking.pk)

            slot = Slot.objects.create(
                service=service,
                title=title,
                start=start,
                end=end,
                kind=SlotKind.AVAILABLE,
            )

        logger.info(
            "taller.calendar.commit",
            extra={"service": service.pk, "slot": slot.pk},
        )
        return slot

    @classmethod
    def move_slot(cls, slot, start, end) -> Slot:
        """
        Move or resize a window, re-validated against all other slots of
        the service.

        Raises:
            TallerError('INVALID_INTERVAL'): If end <= start
            TallerError('SLOT_BOOKED'): If the slot was already hired
            TallerError('SLOT_CONFLICT'): If the new window overlaps another slot
        """
        interval = _interval(start, end)

        with transaction.atomic():
            service_id = resolve(Slot, slot).service_id
            service = lock(ExternalService, service_id)
            slot = lock(Slot, slot)

            if slot.is_booked:
                raise TallerError('SLOT_BOOKED', slot=slot.pk)

            blocking = _conflict(service, interval, exclude=slot)
            if blocking is not None:
                raise TallerError('SLOT_CONFLICT', conflict_with=blocking.pk)

            slot.start = start
            slot.end = end
            slot.save(update_fields=['start', 'end'])

        logger.info(
            "taller.calendar.move",
            extra={"service": service.pk, "slot": slot.pk},
        )
        return slot

    @classmethod
    def remove_slot(cls, slot) -> None:
        """
        Delete an available window.

        Raises:
            TallerError('SLOT_BOOKED'): If the slot was already hired
        """
        with transaction.atomic():
            service_id = resolve(Slot, slot).service_id
            lock(ExternalService, service_id)
            slot = lock(Slot, slot)

            if slot.is_booked:
                raise TallerError('SLOT_BOOKED', slot=slot.pk)

            slot_id = slot.pk
            slot.delete()

        logger.info(
            "taller.calendar.remove",
            extra={"service": service_id, "slot": slot_id},
        )

    @classmethod
    def book_slot(cls, slot, evaluation=None, requester=None) -> Slot:
        """
        Hire an available window: AVAILABLE -> BOOKED, with a pending
        request for the provider to answer.

        Raises:
            TallerError('SERVICE_UNAVAILABLE'): If the service is switched off
            TallerError('SLOT_BOOKED'): If someone already hired it
        """
        with transaction.atomic():
            service_id = resolve(Slot, slot).service_id
            service = lock(ExternalService, service_id)
            slot = lock(Slot, slot)

            if not service.available:
                raise TallerError('SERVICE_UNAVAILABLE', service=service.pk)
            if slot.is_booked:
                raise TallerError('SLOT_BOOKED', slot=slot.pk)

            slot.kind = SlotKind.BOOKED
            slot.evaluation = evaluation
            slot.request_status = RequestStatus.PENDING
            slot.requested_by = requester
            slot.responded_at = None
            slot.save(update_fields=[
                'kind', 'evaluation', 'request_status', 'requested_by', 'responded_at',
            ])

        logger.info(
            "taller.calendar.book",
            extra={"service": service.pk, "slot": slot.pk},
        )
        return slot

    @classmethod
    def release_slot(cls, slot, evaluation=None) -> Slot:
        """
        Give a hired window back: BOOKED -> AVAILABLE.

        Does nothing when the slot is not booked, when evaluation is given
        and the slot belongs to another one, or when the provider already
        completed the work.
        """
        with transaction.atomic():
            service_id = resolve(Slot, slot).service_id
            lock(ExternalService, service_id)
            slot = lock(Slot, slot)

            if not slot.is_booked or slot.request_status == RequestStatus.COMPLETED:
                return slot
            if evaluation is not None and slot.evaluation_id != getattr(evaluation, 'pk', evaluation):
                return slot

            slot.kind = SlotKind.AVAILABLE
            slot.evaluation = None
            slot.request_status = ''
            slot.requested_by = None
            slot.responded_at = None
            slot.save(update_fields=[
                'kind', 'evaluation', 'request_status', 'requested_by', 'responded_at',
            ])

        logger.info(
            "taller.calendar.release",
            extra={"service": service_id, "slot": slot.pk},
        )
        return slot

    @classmethod
    def respond_request(cls, slot, status, user=None) -> Slot:
        """
        Provider answer to a hire request.

        PENDING may become ACCEPTED or REJECTED, ACCEPTED may become
        COMPLETED. A rejection puts the window back on the market.

        Raises:
            TallerError('PERMISSION_DENIED'): If user does not own the service
            TallerError('INVALID_STATUS'): If the transition is not allowed
        """
        with transaction.atomic():
            service_id = resolve(Slot, slot).service_id
            service = lock(ExternalService, service_id)
            slot = lock(Slot, slot)

            if user is not None and service.owner_id != user.pk:
                raise TallerError('PERMISSION_DENIED', slot=slot.pk)

            current = slot.request_status
            if status not in REQUEST_TRANSITIONS.get(current, ()):
                raise TallerError(
                    'INVALID_STATUS',
                    slot=slot.pk,
                    current=current,
                    requested=str(status),
                )

            slot.request_status = status
            slot.responded_at = timezone.now()
            fields = ['request_status', 'responded_at']
            if status == RequestStatus.REJECTED:
                slot.kind = SlotKind.AVAILABLE
                slot.evaluation = None
                fields += ['kind', 'evaluation']
            slot.save(update_fields=fields)

        logger.info(
            "taller.calendar.respond",
            extra={"service": service.pk, "slot": slot.pk, "status": str(status)},
        )
        return slot

    @classmethod
    def requests_received(cls, user):
        """Hire requests on the services user publishes."""
        return Slot.objects.received_by(user).select_related('service', 'evaluation').order_by('start')

    @classmethod
    def requests_sent(cls, user):
        """Hire requests user made on other workshops' services."""
        return Slot.objects.sent_by(user).select_related('service', 'evaluation').order_by('start')

    @classmethod
    def upcoming(cls, service, include_booked=True):
        """Slots of the service that have not ended yet."""
        qs = Slot.objects.for_service(service).filter(end__gt=timezone.now())
        if not include_booked:
            qs = qs.available()
        return qs.order_by('start')

    @classmethod
    def vehicle_busy(cls, vehicle, exclude=None) -> Evaluation | None:
        """
        Evaluation currently occupying the vehicle, if any.

        Vehicle booking is status based: every evaluation that is not
        rejected occupies it, regardless of dates.
        """
        return find_conflict(
            VEHICLE_STATUS,
            None,
            Evaluation.objects.for_vehicle(vehicle).order_by('pk'),
            exclude=exclude,
        )
