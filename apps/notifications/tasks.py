"""
Celery tasks for email notifications.
"""
import logging
from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_booking_notification_task(self, booking_id: str, notification_type: str):
    """
    Send one booking lifecycle email.

    Args:
        booking_id: UUID of the booking
        notification_type: NotificationType value
    """
    from apps.bookings.models import Booking
    from apps.notifications.services.email_service import EmailNotificationService

    try:
        booking = Booking.objects.select_related('service').get(id=booking_id)
    except Booking.DoesNotExist:
        logger.warning(f"Booking {booking_id} not found for notification")
        return

    try:
        EmailNotificationService.send_booking_email(booking, notification_type)
        logger.info(f"Email task completed: {notification_type} for booking {booking_id}")
    except Exception as e:
        logger.error(f"Email task failed: {notification_type} for booking {booking_id}: {e}")
        raise self.retry(exc=e)
