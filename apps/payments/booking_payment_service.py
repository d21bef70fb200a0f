"""
Booking payment service.

This module handles:
- Pricing a booking, with an optional discount code and loyalty points
- Creating Stripe PaymentIntents for bookings
- Canceling intents superseded by a newer one for the same booking
"""
from decimal import Decimal
from typing import Dict, Any, Optional
import logging

import stripe
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.bookings.models import Booking
from apps.core.exceptions import InvalidOperation, ServiceUnavailable
from apps.core.utils.constants import (
    BOOKING_STATUS_CANCELLED,
    PAYMENT_STATUS_PENDING,
    PAYMENT_STATUS_FAILED,
    TRANSACTION_STATUS_PENDING,
    TRANSACTION_STATUS_CANCELED,
)
from apps.customers.services import resolve_customer_for_contact
from apps.discounts.services.discount_service import validate_discount, normalize_code
from apps.loyalty.services.loyalty_service import points_for_amount, quote_points
from apps.payments.events import PaymentIntentMetadata, decimal_to_cents
from apps.payments.models import PaymentTransaction
from infrastructure.integrations.stripe.client import stripe_client

logger = logging.getLogger(__name__)

PAYABLE_STATUSES = {PAYMENT_STATUS_PENDING, PAYMENT_STATUS_FAILED}


class BookingPaymentService:
    """
    Service for creating booking payments.
    """

    @staticmethod
    def ensure_customer(booking: Booking):
        """Link the booking to a customer, resolving one from its contact email."""
        if booking.customer_id:
            return booking.customer

        customer = resolve_customer_for_contact(booking.name, booking.email, booking.phone)
        Booking.objects.filter(pk=booking.pk, customer__isnull=True).update(customer=customer)
        booking.customer = customer
        return customer

    @staticmethod
    def price_booking(booking: Booking, discount_code: Optional[str] = None, points_used: int = 0) -> Dict[str, Any]:
        """
        Work out what the customer pays. The discount applies to the service
        price first; loyalty points then come off what is left.

        Raises:
            InvalidOperation: The discount code does not apply, or the points
                cannot be used
        """
        subtotal = booking.service.price
        discount_amount = Decimal('0.00')
        points_value = Decimal('0.00')
        code = None

        if discount_code:
            result = validate_discount(
                code=discount_code,
                customer_id=booking.customer_id,
                subtotal=subtotal,
                exclude_booking_id=booking.id,
            )
            if not result.valid:
                raise InvalidOperation(result.message)
            discount_amount = result.amount
            code = result.code

        if points_used:
            points_value = quote_points(booking.customer_id, points_used)
            if points_value > subtotal - discount_amount:
                raise InvalidOperation('Points exceed the amount due')

        total = subtotal - discount_amount - points_value
        return {
            'subtotal': subtotal,
            'discount_amount': discount_amount,
            'discount_code': code,
            'points_used': points_used,
            'points_value': points_value,
            'total': total,
            'points': points_for_amount(total),
        }

    @staticmethod
    def cancel_superseded_intents(booking: Booking, current_intent_id: str) -> int:
        """
        Cancel the booking's other pending transactions so only the newest
        intent can complete the payment. The Stripe intents are canceled
        after commit; one that already went through is reconciled as a
        duplicate payment by the webhook handler.
        """
        stale_ids = list(
            PaymentTransaction.objects.select_for_update()
            .filter(booking=booking, status=TRANSACTION_STATUS_PENDING)
            .exclude(gateway_intent_id=current_intent_id)
            .values_list('gateway_intent_id', flat=True)
        )
        if not stale_ids:
            return 0

        now = timezone.now()
        PaymentTransaction.objects.filter(gateway_intent_id__in=stale_ids).update(
            status=TRANSACTION_STATUS_CANCELED,
            error_message='Superseded by a newer payment intent',
            processed_at=now,
            updated_at=now,
        )
        transaction.on_commit(lambda: BookingPaymentService._cancel_at_gateway(stale_ids))
        logger.info(f"Canceled {len(stale_ids)} superseded payment intent(s) for booking {booking.id}")
        return len(stale_ids)

    @staticmethod
    def _cancel_at_gateway(intent_ids):
        for intent_id in intent_ids:
            try:
                stripe_client.cancel_payment_intent(intent_id)
            except stripe.StripeError as e:
                logger.warning(f"Could not cancel superseded payment intent {intent_id}: {str(e)}")

    @staticmethod
    def create_payment_intent(booking_id, discount_code: Optional[str] = None, points_used: int = 0) -> Dict[str, Any]:
        """
        Create a PaymentIntent for a booking.

        The Stripe call happens before the transaction row is written, so a
        gateway failure leaves no payment state behind. Points are only
        checked against the balance here and are deducted when the payment
        succeeds.

        Returns:
            Dictionary with client_secret, payment_intent_id and the pricing

        Raises:
            NotFound: Unknown booking
            InvalidOperation: Booking not payable, bad discount or points, nothing to pay
            ServiceUnavailable: Stripe error or timeout
        """
        from apps.bookings.services.booking_service import get_booking

        booking = get_booking(booking_id)

        if booking.status == BOOKING_STATUS_CANCELLED:
            raise InvalidOperation('Cannot pay for a cancelled booking')
        if booking.payment_status not in PAYABLE_STATUSES:
            raise InvalidOperation(f"Booking payment is already {booking.payment_status}")

        customer = BookingPaymentService.ensure_customer(booking)
        pricing = BookingPaymentService.price_booking(
            booking,
            normalize_code(discount_code) if discount_code else None,
            points_used,
        )

        if pricing['total'] <= 0:
            raise InvalidOperation('Nothing to pay for this booking')

        amount_cents = decimal_to_cents(pricing['total'])
        metadata = PaymentIntentMetadata(
            booking_id=str(booking.id),
            customer_id=str(customer.id),
            discount_code=pricing['discount_code'],
            points_used=points_used,
        )

        try:
            payment_intent = stripe_client.create_payment_intent(
                amount=amount_cents,
                currency=settings.STRIPE_CURRENCY,
                customer_email=booking.email,
                metadata=metadata.to_stripe(),
                idempotency_key=(
                    f"booking-{booking.id}-{amount_cents}-"
                    f"{pricing['discount_code'] or 'none'}-{points_used}"
                ),
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe unavailable creating intent for booking {booking.id}: {str(e)}")
            raise ServiceUnavailable('Payment provider unavailable, please try again.')

        with transaction.atomic():
            payment, created = PaymentTransaction.objects.get_or_create(
                gateway_intent_id=payment_intent.id,
                defaults={
                    'booking': booking,
                    'customer': customer,
                    'amount': pricing['total'],
                    'currency': settings.STRIPE_CURRENCY,
                    'points_earned': pricing['points'],
                    'points_redeemed': points_used,
                    'discount_applied': pricing['discount_amount'],
                    'discount_code': pricing['discount_code'],
                }
            )
            BookingPaymentService.cancel_superseded_intents(booking, payment_intent.id)

        if created:
            logger.info(f"Created payment intent {payment_intent.id} for booking {booking.id}: ${pricing['total']}")
        else:
            logger.info(f"Reusing payment intent {payment_intent.id} for booking {booking.id}")

        return {
            'client_secret': payment_intent.client_secret,
            'payment_intent_id': payment_intent.id,
            'transaction_id': payment.id,
            'subtotal': pricing['subtotal'],
            'discount_amount': pricing['discount_amount'],
            'discount_code': pricing['discount_code'],
            'points_used': points_used,
            'points_value': pricing['points_value'],
            'amount': pricing['total'],
            'amount_cents': amount_cents,
            'currency': settings.STRIPE_CURRENCY,
            'points_to_earn': pricing['points'],
        }


# Singleton instance
booking_payment_service = BookingPaymentService()
