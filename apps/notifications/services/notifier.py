"""
Fire-and-forget booking notifications.

Notifications are queued after the surrounding transaction commits. A
failure to queue is logged and never propagates to the caller, so a
booking or payment change is never undone by a notification problem.
"""
import logging

from django.db import transaction

from apps.notifications.models import NotificationType

logger = logging.getLogger(__name__)


def notify_booking(booking_id, notification_type: str) -> None:
    """Queue a booking email once the current transaction commits."""
    transaction.on_commit(lambda: _enqueue(str(booking_id), notification_type))


def _enqueue(booking_id: str, notification_type: str) -> None:
    from apps.notifications.tasks import send_booking_notification_task

    try:
        send_booking_notification_task.delay(booking_id, notification_type)
    except Exception as e:
        logger.error(
            f"Failed to queue {notification_type} notification for booking {booking_id}: {e}",
            exc_info=True
        )


def notify_booking_created(booking_id):
    notify_booking(booking_id, NotificationType.BOOKING_CREATED)


def notify_booking_confirmed(booking_id):
    notify_booking(booking_id, NotificationType.BOOKING_CONFIRMATION)


def notify_booking_cancelled(booking_id):
    notify_booking(booking_id, NotificationType.BOOKING_CANCELLATION)


def notify_booking_rescheduled(booking_id):
    notify_booking(booking_id, NotificationType.BOOKING_RESCHEDULE)


def notify_booking_postponed(booking_id):
    notify_booking(booking_id, NotificationType.BOOKING_POSTPONED)


def notify_payment_succeeded(booking_id):
    notify_booking(booking_id, NotificationType.PAYMENT_SUCCESS)


def notify_payment_failed(booking_id):
    notify_booking(booking_id, NotificationType.PAYMENT_FAILED)
