"""
Payment models for Stripe integration and webhook logging.

This module contains:
- PaymentTransaction: One Stripe PaymentIntent for a booking
- WebhookLog: Logs all webhook events for debugging and audit
"""
from django.db import models
from django.utils import timezone
from apps.core.models import BaseModel
from apps.core.utils.constants import (
    TRANSACTION_STATUSES,
    TRANSACTION_STATUS_PENDING,
    WEBHOOK_SOURCES,
    WEBHOOK_SOURCE_STRIPE,
)


class PaymentTransaction(BaseModel):
    """
    Stripe PaymentIntent created for a booking.

    gateway_intent_id identifies the transaction when webhook events arrive;
    the status only ever leaves 'succeeded' through a refund recorded on the
    booking.
    """
    booking = models.ForeignKey(
        'bookings.Booking',
        on_delete=models.PROTECT,
        related_name='payment_transactions'
    )
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payment_transactions'
    )

    gateway_intent_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe PaymentIntent ID (pi_xxx)"
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2, help_text="Amount charged")
    currency = models.CharField(max_length=3, default='usd')
    status = models.CharField(
        max_length=20,
        choices=TRANSACTION_STATUSES,
        default=TRANSACTION_STATUS_PENDING,
        db_index=True
    )

    points_earned = models.PositiveIntegerField(default=0)
    discount_applied = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    discount_code = models.CharField(max_length=50, null=True, blank=True)
    points_redeemed = models.PositiveIntegerField(default=0, help_text="Loyalty points applied to this payment")

    error_message = models.TextField(blank=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'payment_transactions'
        verbose_name = 'Payment Transaction'
        verbose_name_plural = 'Payment Transactions'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['booking', 'status']),
        ]

    def __str__(self):
        return f"{self.gateway_intent_id} - {self.amount} {self.currency} ({self.status})"


class WebhookLog(BaseModel):
    """
    Logs every webhook event.

    Used for debugging, audit trail, and skipping events that were already
    processed.
    """
    source = models.CharField(
        max_length=10,
        choices=WEBHOOK_SOURCES,
        default=WEBHOOK_SOURCE_STRIPE,
        db_index=True
    )

    # Event details
    event_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Event type (e.g., 'payment_intent.succeeded')"
    )
    event_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Unique event ID from webhook provider"
    )

    # Event payload
    payload = models.JSONField(
        help_text="Full webhook payload (for debugging)"
    )

    # Processing status
    processed = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether webhook was successfully processed"
    )
    result = models.CharField(max_length=20, blank=True)
    error_message = models.TextField(
        blank=True,
        help_text="Error message if processing failed"
    )
    processing_time = models.FloatField(
        null=True,
        blank=True,
        help_text="Processing time in seconds"
    )

    # Retry tracking
    retry_count = models.IntegerField(
        default=0,
        help_text="Number of failed processing attempts"
    )
    last_retry_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When last failed attempt was made"
    )

    class Meta:
        db_table = 'webhook_logs'
        verbose_name = 'Webhook Log'
        verbose_name_plural = 'Webhook Logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['source', 'event_type']),
            models.Index(fields=['created_at']),
        ]

    def __str__(self):
        status = "✓" if self.processed else "✗"
        return f"{status} {self.source} - {self.event_type} - {self.created_at}"

    def mark_processed(self, result='', processing_time=None):
        """Mark webhook as successfully processed."""
        self.processed = True
        self.result = result
        self.error_message = ''
        self.processing_time = processing_time
        self.save(update_fields=['processed', 'result', 'error_message', 'processing_time', 'updated_at'])

    def mark_failed(self, error_message):
        """Mark webhook processing as failed and increment retry count."""
        self.processed = False
        self.error_message = error_message
        self.retry_count += 1
        self.last_retry_at = timezone.now()
        self.save(update_fields=['processed', 'error_message', 'retry_count', 'last_retry_at', 'updated_at'])
