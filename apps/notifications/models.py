"""
Notification models
"""
from django.db import models
from apps.core.models import BaseModel


class NotificationType(models.TextChoices):
    """Types of notifications"""
    BOOKING_CREATED = 'booking_created', 'Booking Received'
    BOOKING_CONFIRMATION = 'booking_confirmation', 'Booking Confirmation'
    BOOKING_CANCELLATION = 'booking_cancellation', 'Booking Cancellation'
    BOOKING_RESCHEDULE = 'booking_reschedule', 'Booking Rescheduled'
    BOOKING_POSTPONED = 'booking_postponed', 'Booking Postponed'
    PAYMENT_SUCCESS = 'payment_success', 'Payment Successful'
    PAYMENT_FAILED = 'payment_failed', 'Payment Failed'


class NotificationStatus(models.TextChoices):
    """Status of email notifications"""
    PENDING = 'pending', 'Pending'
    SENT = 'sent', 'Sent'
    FAILED = 'failed', 'Failed'


class EmailNotificationLog(BaseModel):
    """
    Tracks all sent email notifications for auditing and debugging.
    """
    email_type = models.CharField(
        max_length=50,
        choices=NotificationType.choices,
        db_index=True
    )
    recipient_email = models.EmailField(db_index=True)
    recipient_name = models.CharField(max_length=255, blank=True)
    subject = models.CharField(max_length=255)

    status = models.CharField(
        max_length=20,
        choices=NotificationStatus.choices,
        default=NotificationStatus.PENDING,
        db_index=True
    )

    error_message = models.TextField(blank=True)
    retry_count = models.PositiveSmallIntegerField(default=0)
    sent_at = models.DateTimeField(null=True, blank=True)

    booking = models.ForeignKey(
        'bookings.Booking',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='email_logs'
    )

    class Meta:
        db_table = 'email_notification_logs'
        verbose_name = 'Email Notification Log'
        verbose_name_plural = 'Email Notification Logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['booking', 'email_type']),
        ]

    def __str__(self):
        return f"{self.email_type} to {self.recipient_email} ({self.status})"
