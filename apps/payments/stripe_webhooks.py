"""
Stripe webhook handlers for booking payments.

Stripe delivers events at least once and in any order. Each handler runs in
one transaction and keys its work on the PaymentIntent id, so replaying an
event leaves booking, discount and loyalty state unchanged:

- payment_intent.succeeded: transaction succeeded, booking confirmed and
  paid, discount usage recorded, applied points spent, loyalty credited.
  A second payment for an already paid booking changes nothing else
- payment_intent.payment_failed: transaction failed, booking back to
  pending with a failed payment, unless the intent already succeeded
- payment_intent.canceled: pending transaction canceled
"""
from enum import Enum
import json
import logging
import time

from django.db import transaction
from django.utils import timezone

from apps.bookings.models import Booking
from apps.core.utils.constants import (
    BOOKING_STATUS_PENDING,
    BOOKING_STATUS_CONFIRMED,
    PAYMENT_STATUS_PENDING,
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_FAILED,
    TRANSACTION_STATUS_PENDING,
    TRANSACTION_STATUS_SUCCEEDED,
    TRANSACTION_STATUS_FAILED,
    TRANSACTION_STATUS_CANCELED,
    STRIPE_EVENT_PAYMENT_SUCCEEDED,
    STRIPE_EVENT_PAYMENT_FAILED,
    STRIPE_EVENT_PAYMENT_CANCELED,
    WEBHOOK_SOURCE_STRIPE,
)
from apps.discounts.services.discount_service import record_usage
from apps.loyalty.services import loyalty_service
from apps.notifications.services import notifier
from apps.payments.events import PaymentIntentEvent
from apps.payments.models import PaymentTransaction, WebhookLog

logger = logging.getLogger(__name__)


class ReconcileResult(str, Enum):
    PROCESSED = 'processed'
    DUPLICATE = 'duplicate'
    IGNORED = 'ignored'
    UNKNOWN_INTENT = 'unknown_intent'
    UNHANDLED = 'unhandled'


def _payload(event) -> dict:
    return json.loads(json.dumps(event, default=str))


def get_webhook_log(event) -> WebhookLog:
    """Fetch or create the audit row for an event."""
    webhook_log, _ = WebhookLog.objects.get_or_create(
        event_id=event['id'],
        defaults={
            'source': WEBHOOK_SOURCE_STRIPE,
            'event_type': event['type'],
            'payload': _payload(event),
        }
    )
    return webhook_log


def _lock_transaction(intent_id):
    return PaymentTransaction.objects.select_for_update().filter(gateway_intent_id=intent_id).first()


def _lock_booking(booking_id):
    return Booking.objects.select_for_update().select_related('service').get(id=booking_id)


@transaction.atomic
def handle_payment_intent_succeeded(event: PaymentIntentEvent) -> ReconcileResult:
    """
    Apply a successful payment exactly once.
    """
    payment = _lock_transaction(event.intent_id)
    if payment is None:
        logger.warning(f"No transaction for payment intent {event.intent_id} ({event.event_id})")
        return ReconcileResult.UNKNOWN_INTENT

    if payment.status == TRANSACTION_STATUS_SUCCEEDED:
        logger.debug(f"Payment intent {event.intent_id} already succeeded, nothing to do")
        return ReconcileResult.DUPLICATE

    now = timezone.now()
    updated = (
        PaymentTransaction.objects.filter(pk=payment.pk)
        .exclude(status=TRANSACTION_STATUS_SUCCEEDED)
        .update(status=TRANSACTION_STATUS_SUCCEEDED, error_message='', processed_at=now, updated_at=now)
    )
    if not updated:
        logger.debug(f"Payment intent {event.intent_id} succeeded concurrently, nothing to do")
        return ReconcileResult.DUPLICATE

    if event.amount and event.amount != payment.amount:
        logger.warning(
            f"Payment intent {event.intent_id} reported {event.amount}, expected {payment.amount}"
        )

    booking = _lock_booking(payment.booking_id)
    if booking.payment_status == PAYMENT_STATUS_PAID:
        logger.warning(
            f"Booking {booking.id} was already paid; payment intent {event.intent_id} "
            f"is a second payment and needs a refund"
        )
        return ReconcileResult.DUPLICATE

    booking.payment_status = PAYMENT_STATUS_PAID
    if booking.status in (BOOKING_STATUS_PENDING, BOOKING_STATUS_CONFIRMED):
        booking.status = BOOKING_STATUS_CONFIRMED
    else:
        logger.warning(
            f"Payment received for {booking.status} booking {booking.id}; status left unchanged"
        )
    booking.save(update_fields=['status', 'payment_status', 'updated_at'])

    if payment.discount_code:
        record_usage(payment.discount_code, payment.customer, booking, payment.discount_applied)

    if payment.customer_id:
        if payment.points_redeemed:
            loyalty_service.spend_points(payment.customer, payment.points_redeemed)
        loyalty_service.record_payment(payment.customer, payment.amount, payment.points_earned)
    else:
        logger.warning(f"Transaction {payment.id} has no customer; loyalty not credited")

    notifier.notify_payment_succeeded(booking.id)
    logger.info(f"Payment intent {event.intent_id} succeeded for booking {booking.id}")
    return ReconcileResult.PROCESSED


@transaction.atomic
def handle_payment_intent_failed(event: PaymentIntentEvent) -> ReconcileResult:
    """
    Record a failed payment attempt. A failure that arrives after the
    intent succeeded is stale and ignored.
    """
    payment = _lock_transaction(event.intent_id)
    if payment is None:
        logger.warning(f"No transaction for payment intent {event.intent_id} ({event.event_id})")
        return ReconcileResult.UNKNOWN_INTENT

    if payment.status == TRANSACTION_STATUS_SUCCEEDED:
        logger.info(f"Ignoring failure for already succeeded payment intent {event.intent_id}")
        return ReconcileResult.IGNORED

    payment.status = TRANSACTION_STATUS_FAILED
    payment.error_message = event.failure_message or 'Payment failed'
    payment.processed_at = timezone.now()
    payment.save(update_fields=['status', 'error_message', 'processed_at', 'updated_at'])

    booking = _lock_booking(payment.booking_id)
    if booking.payment_status != PAYMENT_STATUS_PAID:
        booking.payment_status = PAYMENT_STATUS_FAILED
        if booking.status == BOOKING_STATUS_CONFIRMED:
            booking.status = BOOKING_STATUS_PENDING
        booking.save(update_fields=['status', 'payment_status', 'updated_at'])
        notifier.notify_payment_failed(booking.id)

    logger.info(f"Payment intent {event.intent_id} failed for booking {booking.id}: {payment.error_message}")
    return ReconcileResult.PROCESSED


@transaction.atomic
def handle_payment_intent_canceled(event: PaymentIntentEvent) -> ReconcileResult:
    payment = _lock_transaction(event.intent_id)
    if payment is None:
        logger.warning(f"No transaction for payment intent {event.intent_id} ({event.event_id})")
        return ReconcileResult.UNKNOWN_INTENT

    if payment.status not in (TRANSACTION_STATUS_PENDING, TRANSACTION_STATUS_FAILED):
        logger.info(f"Ignoring cancellation of {payment.status} payment intent {event.intent_id}")
        return ReconcileResult.IGNORED

    payment.status = TRANSACTION_STATUS_CANCELED
    payment.processed_at = timezone.now()
    payment.save(update_fields=['status', 'processed_at', 'updated_at'])

    Booking.objects.filter(
        pk=payment.booking_id,
        payment_status=PAYMENT_STATUS_FAILED,
    ).update(payment_status=PAYMENT_STATUS_PENDING, updated_at=timezone.now())

    logger.info(f"Payment intent {event.intent_id} canceled")
    return ReconcileResult.PROCESSED


# Event handler mapping
STRIPE_EVENT_HANDLERS = {
    STRIPE_EVENT_PAYMENT_SUCCEEDED: handle_payment_intent_succeeded,
    STRIPE_EVENT_PAYMENT_FAILED: handle_payment_intent_failed,
    STRIPE_EVENT_PAYMENT_CANCELED: handle_payment_intent_canceled,
}


def process_stripe_webhook(event) -> ReconcileResult:
    """
    Main entry point for processing Stripe webhooks.

    Args:
        event: Verified Stripe event

    Returns:
        ReconcileResult describing what happened

    Raises:
        Exception: Persistence errors, after the failure is logged. Nothing
            from the failed attempt is committed, so Stripe's retry starts
            clean.
    """
    event_type = event['type']
    event_id = event['id']

    logger.info(f"Received Stripe webhook: {event_type} ({event_id})")

    # Check if event already processed (idempotency)
    if WebhookLog.objects.filter(event_id=event_id, processed=True).exists():
        logger.debug(f"Event {event_id} already processed, skipping")
        return ReconcileResult.DUPLICATE

    handler = STRIPE_EVENT_HANDLERS.get(event_type)
    webhook_log = get_webhook_log(event)

    if handler is None:
        logger.info(f"No handler for event type: {event_type}")
        webhook_log.mark_processed(result=ReconcileResult.UNHANDLED.value)
        return ReconcileResult.UNHANDLED

    start_time = time.time()
    try:
        result = handler(PaymentIntentEvent.from_stripe(event))
    except Exception as e:
        error_msg = f"Error processing {event_type}: {str(e)}"
        logger.error(error_msg, exc_info=True)
        webhook_log.mark_failed(error_msg)
        raise

    processing_time = time.time() - start_time
    webhook_log.mark_processed(result=result.value, processing_time=processing_time)
    logger.info(f"Processed {event_type} ({event_id}): {result.value} in {processing_time:.2f}s")
    return result
