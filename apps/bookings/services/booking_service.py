"""
Booking state machine.

Status transitions:
    pending   -> confirmed            (admin)
    pending   -> postponed            (admin)
    confirmed -> postponed            (admin)
    pending | confirmed | postponed -> pending with a new slot   (reschedule)
    pending | confirmed | postponed -> cancelled                 (terminal)

Payment status moves separately: pending -> paid | failed, failed -> paid
and paid -> refunded. Payment changes made by the webhook reconciler write
the columns directly inside its own transaction.
"""
from dataclasses import dataclass
from datetime import date, time
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from apps.bookings.models import Booking
from apps.core.exceptions import InvalidOperation, SlotConflict
from apps.core.utils.constants import (
    BOOKING_STATUS_PENDING,
    BOOKING_STATUS_CONFIRMED,
    BOOKING_STATUS_CANCELLED,
    BOOKING_STATUS_POSTPONED,
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_REFUNDED,
)
from apps.customers.services import get_customer
from apps.notifications.services import notifier
from apps.schedules.services.availability import get_opening_window, invalidate_slots_for_dates
from apps.services.models import Service

logger = logging.getLogger(__name__)


# Target status -> statuses it may be entered from
BOOKING_TRANSITIONS = {
    BOOKING_STATUS_CONFIRMED: {BOOKING_STATUS_PENDING},
    BOOKING_STATUS_POSTPONED: {BOOKING_STATUS_PENDING, BOOKING_STATUS_CONFIRMED},
    BOOKING_STATUS_CANCELLED: {
        BOOKING_STATUS_PENDING,
        BOOKING_STATUS_CONFIRMED,
        BOOKING_STATUS_POSTPONED,
    },
}

RESCHEDULABLE_STATUSES = {
    BOOKING_STATUS_PENDING,
    BOOKING_STATUS_CONFIRMED,
    BOOKING_STATUS_POSTPONED,
}


@dataclass(frozen=True)
class ContactInfo:
    name: str
    email: str
    phone: str = ''
    notes: str = ''


def slot_is_taken(target_date: date, target_time: time, exclude_booking_id=None) -> bool:
    """Whether a non-cancelled booking already holds the exact slot."""
    queryset = Booking.objects.occupying(target_date, target_time)
    if exclude_booking_id is not None:
        queryset = queryset.exclude(id=exclude_booking_id)
    return queryset.exists()


def validate_slot(target_date: date, target_time: time) -> None:
    """
    Reject slots in the past or outside opening hours.

    Raises:
        ValidationError: With a human-readable reason
    """
    if target_date < timezone.localdate():
        raise ValidationError('Cannot book a date in the past')

    window = get_opening_window(target_date)
    if window is None:
        raise ValidationError('The salon is closed on this date')

    if not window.contains(target_time):
        raise ValidationError(
            f"Time must be between {window.open_time:%H:%M} and {window.close_time:%H:%M}"
        )


def get_booking(booking_id) -> Booking:
    try:
        return Booking.objects.select_related('service', 'customer').get(id=booking_id)
    except (Booking.DoesNotExist, DjangoValidationError, ValueError, TypeError):
        raise NotFound('Booking not found')


def _lock_booking(booking_id) -> Booking:
    try:
        return Booking.objects.select_for_update().get(id=booking_id)
    except (Booking.DoesNotExist, DjangoValidationError, ValueError, TypeError):
        raise NotFound('Booking not found')


def _ensure_transition(booking: Booking, target_status: str) -> None:
    allowed_from = BOOKING_TRANSITIONS.get(target_status, set())
    if booking.status not in allowed_from:
        raise InvalidOperation(
            f"Cannot change booking from {booking.status} to {target_status}"
        )


def _after_commit_invalidate(*dates) -> None:
    transaction.on_commit(lambda: invalidate_slots_for_dates(*dates))


def create_booking(
    service_id,
    target_date: date,
    target_time: time,
    contact: ContactInfo,
    customer_id=None
) -> Booking:
    """
    Create a pending booking for a free slot.

    The read check gives a friendly error on the common path. The partial
    unique constraint on (date, time) decides concurrent inserts.

    Raises:
        NotFound: Unknown service or customer
        ValidationError: Past date, closed day or time outside opening hours
        SlotConflict: The slot is held by another non-cancelled booking
    """
    try:
        service = Service.objects.get(id=service_id, is_active=True)
    except (Service.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound('Service not found')

    customer = get_customer(customer_id) if customer_id else None

    validate_slot(target_date, target_time)

    try:
        with transaction.atomic():
            if slot_is_taken(target_date, target_time):
                raise SlotConflict()

            booking = Booking.objects.create(
                service=service,
                customer=customer,
                date=target_date,
                time=target_time,
                name=contact.name,
                email=contact.email,
                phone=contact.phone,
                notes=contact.notes,
            )
            _after_commit_invalidate(target_date)
            notifier.notify_booking_created(booking.id)
    except IntegrityError:
        if Booking.objects.occupying(target_date, target_time).exists():
            logger.info(f"Slot {target_date} {target_time} taken by a concurrent booking")
            raise SlotConflict()
        raise

    logger.info(f"Booking {booking.id} created for {target_date} {target_time}")
    return booking


@transaction.atomic
def confirm_booking(booking_id) -> Booking:
    """Admin confirmation of a pending booking."""
    booking = _lock_booking(booking_id)
    _ensure_transition(booking, BOOKING_STATUS_CONFIRMED)

    booking.status = BOOKING_STATUS_CONFIRMED
    booking.save(update_fields=['status', 'updated_at'])

    notifier.notify_booking_confirmed(booking.id)
    logger.info(f"Booking {booking.id} confirmed")
    return booking


@transaction.atomic
def postpone_booking(booking_id) -> Booking:
    """
    Mark a booking postponed. The slot stays held until the booking is
    rescheduled or cancelled.
    """
    booking = _lock_booking(booking_id)
    _ensure_transition(booking, BOOKING_STATUS_POSTPONED)

    booking.status = BOOKING_STATUS_POSTPONED
    booking.save(update_fields=['status', 'updated_at'])

    notifier.notify_booking_postponed(booking.id)
    logger.info(f"Booking {booking.id} postponed")
    return booking


@transaction.atomic
def cancel_booking(booking_id, reason: str = '') -> Booking:
    """Cancel a booking and free its slot."""
    booking = _lock_booking(booking_id)
    _ensure_transition(booking, BOOKING_STATUS_CANCELLED)

    booking.status = BOOKING_STATUS_CANCELLED
    booking.cancellation_reason = reason or ''
    booking.cancelled_at = timezone.now()
    booking.save(update_fields=['status', 'cancellation_reason', 'cancelled_at', 'updated_at'])

    _after_commit_invalidate(booking.date)
    notifier.notify_booking_cancelled(booking.id)
    logger.info(f"Booking {booking.id} cancelled")
    return booking


def reschedule_booking(booking_id, new_date: date, new_time: time) -> Booking:
    """
    Move a booking to a new slot. The booking returns to pending and needs
    confirmation again.

    Raises:
        InvalidOperation: Booking is cancelled
        ValidationError: New slot is in the past or outside opening hours
        SlotConflict: New slot is held by another booking
    """
    validate_slot(new_date, new_time)

    try:
        with transaction.atomic():
            booking = _lock_booking(booking_id)
            if booking.status not in RESCHEDULABLE_STATUSES:
                raise InvalidOperation(f"Cannot reschedule a {booking.status} booking")

            if slot_is_taken(new_date, new_time, exclude_booking_id=booking.id):
                raise SlotConflict()

            old_date = booking.date
            booking.date = new_date
            booking.time = new_time
            booking.status = BOOKING_STATUS_PENDING
            booking.save(update_fields=['date', 'time', 'status', 'updated_at'])

            _after_commit_invalidate(old_date, new_date)
            notifier.notify_booking_rescheduled(booking.id)
    except IntegrityError:
        if Booking.objects.occupying(new_date, new_time).exclude(id=booking_id).exists():
            raise SlotConflict()
        raise

    logger.info(f"Booking {booking.id} rescheduled to {new_date} {new_time}")
    return booking


@transaction.atomic
def mark_refunded(booking_id) -> Booking:
    """Admin refund bookkeeping: paid -> refunded."""
    booking = _lock_booking(booking_id)
    if booking.payment_status != PAYMENT_STATUS_PAID:
        raise InvalidOperation(
            f"Only paid bookings can be refunded (payment status: {booking.payment_status})"
        )

    booking.payment_status = PAYMENT_STATUS_REFUNDED
    booking.save(update_fields=['payment_status', 'updated_at'])

    logger.info(f"Booking {booking.id} marked refunded")
    return booking
