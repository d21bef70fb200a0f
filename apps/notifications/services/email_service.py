"""
Email notification service.
Sends booking lifecycle emails and keeps an audit log of each attempt.
"""
import logging
from typing import Any, Dict, Optional

from django.conf import settings
from django.core.mail import EmailMessage
from django.template.loader import render_to_string
from django.utils import timezone

from apps.notifications.models import (
    EmailNotificationLog,
    NotificationStatus,
    NotificationType,
)

logger = logging.getLogger(__name__)


class EmailNotificationService:
    """
    Service class for sending email notifications.
    """

    TEMPLATE_MAP = {
        NotificationType.BOOKING_CREATED: 'notifications/booking_created.txt',
        NotificationType.BOOKING_CONFIRMATION: 'notifications/booking_confirmation.txt',
        NotificationType.BOOKING_CANCELLATION: 'notifications/booking_cancellation.txt',
        NotificationType.BOOKING_RESCHEDULE: 'notifications/booking_reschedule.txt',
        NotificationType.BOOKING_POSTPONED: 'notifications/booking_postponed.txt',
        NotificationType.PAYMENT_SUCCESS: 'notifications/payment_success.txt',
        NotificationType.PAYMENT_FAILED: 'notifications/payment_failed.txt',
    }

    SUBJECT_MAP = {
        NotificationType.BOOKING_CREATED: 'We received your booking for {service_name}',
        NotificationType.BOOKING_CONFIRMATION: 'Your booking is confirmed - {service_name}',
        NotificationType.BOOKING_CANCELLATION: 'Booking cancelled - {service_name}',
        NotificationType.BOOKING_RESCHEDULE: 'Your booking has been rescheduled - {service_name}',
        NotificationType.BOOKING_POSTPONED: 'Your booking has been postponed - {service_name}',
        NotificationType.PAYMENT_SUCCESS: 'Payment received - {service_name}',
        NotificationType.PAYMENT_FAILED: 'Payment failed - {service_name}',
    }

    @classmethod
    def send_email(
        cls,
        recipient_email: str,
        recipient_name: str,
        notification_type: str,
        context: Dict[str, Any],
        booking=None
    ) -> Optional[EmailNotificationLog]:
        """
        Send an email notification.

        Returns:
            EmailNotificationLog instance or None if skipped

        Raises:
            Exception: Transport errors, after the failure is logged
        """
        if not recipient_email:
            logger.warning(f"Skipping notification {notification_type}: no recipient email")
            return None

        template_name = cls.TEMPLATE_MAP.get(notification_type)
        if not template_name:
            logger.error(f"No template found for notification type: {notification_type}")
            return None

        subject = cls.SUBJECT_MAP[notification_type].format(
            service_name=context.get('service_name', 'your appointment'),
        )

        email_log = EmailNotificationLog.objects.create(
            email_type=notification_type,
            recipient_email=recipient_email,
            recipient_name=recipient_name,
            subject=subject,
            status=NotificationStatus.PENDING,
            booking=booking
        )

        try:
            body = render_to_string(template_name, {**context, 'recipient_name': recipient_name})
            EmailMessage(
                subject=subject,
                body=body,
                from_email=settings.DEFAULT_FROM_EMAIL,
                to=[recipient_email]
            ).send(fail_silently=False)

            email_log.status = NotificationStatus.SENT
            email_log.sent_at = timezone.now()
            email_log.save(update_fields=['status', 'sent_at', 'updated_at'])

            logger.info(f"Email sent successfully: {notification_type} to {recipient_email}")
            return email_log

        except Exception as e:
            email_log.status = NotificationStatus.FAILED
            email_log.error_message = str(e)
            email_log.retry_count += 1
            email_log.save(update_fields=['status', 'error_message', 'retry_count', 'updated_at'])

            logger.error(f"Failed to send email {notification_type} to {recipient_email}: {e}")
            raise

    @classmethod
    def send_booking_email(cls, booking, notification_type: str) -> Optional[EmailNotificationLog]:
        return cls.send_email(
            recipient_email=booking.email,
            recipient_name=booking.name,
            notification_type=notification_type,
            context=cls._build_booking_context(booking),
            booking=booking
        )

    @staticmethod
    def _build_booking_context(booking) -> Dict[str, Any]:
        return {
            'booking_id': str(booking.id),
            'service_name': booking.service.name,
            'date': booking.date.strftime('%A, %B %d, %Y'),
            'time': booking.time.strftime('%H:%M'),
            'status': booking.get_status_display(),
            'cancellation_reason': booking.cancellation_reason,
            'booking_url': f"{settings.FRONTEND_URL}/bookings/{booking.id}",
        }
