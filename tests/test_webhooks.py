"""
Tests for Stripe webhook reconciliation.
"""
from decimal import Decimal
from unittest import mock

import pytest
import stripe
from django.conf import settings

from apps.core.utils.constants import (
    BOOKING_STATUS_PENDING,
    BOOKING_STATUS_CONFIRMED,
    BOOKING_STATUS_CANCELLED,
    PAYMENT_STATUS_PENDING,
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_FAILED,
    DISCOUNT_TYPE_FIXED,
)
from apps.discounts.models import Discount, DiscountUsage
from apps.loyalty.models import CustomerLoyalty
from apps.payments.events import PaymentIntentEvent
from apps.payments.models import PaymentTransaction, WebhookLog
from apps.payments.stripe_webhooks import ReconcileResult, process_stripe_webhook
from tests.stripe_events import payment_intent_event, signed_payload

SUCCEEDED = 'payment_intent.succeeded'
FAILED = 'payment_intent.payment_failed'
CANCELED = 'payment_intent.canceled'


@pytest.fixture
def discounted_payment(pending_payment):
    Discount.objects.create(
        code='WELCOME10',
        name='Welcome',
        discount_type=DISCOUNT_TYPE_FIXED,
        value=Decimal('10'),
    )
    pending_payment.amount = Decimal('40.00')
    pending_payment.points_earned = 40
    pending_payment.discount_applied = Decimal('10.00')
    pending_payment.discount_code = 'WELCOME10'
    pending_payment.save()
    return pending_payment


def test_event_record_from_stripe_payload():
    event = PaymentIntentEvent.from_stripe(payment_intent_event(
        FAILED,
        amount_cents=4250,
        last_payment_error={'message': 'Your card was declined.'},
        metadata={'booking_id': 'b-1', 'discount_code': 'SAVE15'},
    ))

    assert event.intent_id == 'pi_test_123'
    assert event.amount == Decimal('42.50')
    assert event.failure_message == 'Your card was declined.'
    assert event.metadata.booking_id == 'b-1'
    assert event.metadata.customer_id is None
    assert event.metadata.points_used == 0


@pytest.mark.django_db
class TestPaymentSucceeded:

    def test_confirms_and_marks_paid(self, pending_payment):
        result = process_stripe_webhook(payment_intent_event(SUCCEEDED))

        assert result == ReconcileResult.PROCESSED
        pending_payment.refresh_from_db()
        booking = pending_payment.booking
        booking.refresh_from_db()
        assert pending_payment.status == 'succeeded'
        assert pending_payment.processed_at is not None
        assert booking.status == BOOKING_STATUS_CONFIRMED
        assert booking.payment_status == PAYMENT_STATUS_PAID

    def test_credits_loyalty(self, pending_payment, customer):
        process_stripe_webhook(payment_intent_event(SUCCEEDED))

        loyalty = CustomerLoyalty.objects.get(customer=customer)
        assert loyalty.points == 50
        assert loyalty.total_bookings == 1
        assert loyalty.total_spent == Decimal('50.00')

    def test_records_discount_usage(self, discounted_payment):
        process_stripe_webhook(payment_intent_event(SUCCEEDED, amount_cents=4000))

        discount = Discount.objects.get(code='WELCOME10')
        assert discount.used_count == 1
        usage = DiscountUsage.objects.get(discount=discount)
        assert usage.booking_id == discounted_payment.booking_id
        assert usage.amount == Decimal('10.00')

    def test_redelivered_event_is_skipped(self, discounted_payment, customer):
        event = payment_intent_event(SUCCEEDED, amount_cents=4000)

        assert process_stripe_webhook(event) == ReconcileResult.PROCESSED
        assert process_stripe_webhook(event) == ReconcileResult.DUPLICATE

        assert CustomerLoyalty.objects.get(customer=customer).points == 40
        assert Discount.objects.get(code='WELCOME10').used_count == 1

    def test_second_event_for_same_intent_changes_nothing(self, discounted_payment, customer):
        first = payment_intent_event(SUCCEEDED, amount_cents=4000, event_id='evt_1')
        second = payment_intent_event(SUCCEEDED, amount_cents=4000, event_id='evt_2')

        assert process_stripe_webhook(first) == ReconcileResult.PROCESSED
        assert process_stripe_webhook(second) == ReconcileResult.DUPLICATE

        loyalty = CustomerLoyalty.objects.get(customer=customer)
        assert loyalty.points == 40
        assert loyalty.total_bookings == 1
        assert Discount.objects.get(code='WELCOME10').used_count == 1
        assert DiscountUsage.objects.count() == 1
        assert WebhookLog.objects.get(event_id='evt_2').result == 'duplicate'

    def test_second_intent_for_paid_booking_credits_nothing(self, pending_payment, customer):
        PaymentTransaction.objects.create(
            booking=pending_payment.booking,
            customer=customer,
            gateway_intent_id='pi_second',
            amount=Decimal('50.00'),
            currency='usd',
            points_earned=50,
        )

        first = process_stripe_webhook(payment_intent_event(SUCCEEDED, event_id='evt_1'))
        second = process_stripe_webhook(
            payment_intent_event(SUCCEEDED, intent_id='pi_second', event_id='evt_2')
        )

        assert first == ReconcileResult.PROCESSED
        assert second == ReconcileResult.DUPLICATE
        loyalty = CustomerLoyalty.objects.get(customer=customer)
        assert loyalty.total_bookings == 1
        assert loyalty.points == 50
        assert loyalty.total_spent == Decimal('50.00')
        assert PaymentTransaction.objects.get(gateway_intent_id='pi_second').status == 'succeeded'

    def test_spends_applied_points(self, pending_payment, customer):
        CustomerLoyalty.objects.create(customer=customer, points=300)
        pending_payment.amount = Decimal('48.00')
        pending_payment.points_earned = 48
        pending_payment.points_redeemed = 200
        pending_payment.save()

        process_stripe_webhook(payment_intent_event(SUCCEEDED, amount_cents=4800))

        assert CustomerLoyalty.objects.get(customer=customer).points == 148

    def test_spent_points_never_go_negative(self, pending_payment, customer):
        CustomerLoyalty.objects.create(customer=customer, points=100)
        pending_payment.points_redeemed = 200
        pending_payment.save()

        assert process_stripe_webhook(payment_intent_event(SUCCEEDED)) == ReconcileResult.PROCESSED

        assert CustomerLoyalty.objects.get(customer=customer).points == 50

    def test_cancelled_booking_is_paid_but_stays_cancelled(self, pending_payment):
        booking = pending_payment.booking
        booking.status = BOOKING_STATUS_CANCELLED
        booking.save()

        process_stripe_webhook(payment_intent_event(SUCCEEDED))

        booking.refresh_from_db()
        assert booking.status == BOOKING_STATUS_CANCELLED
        assert booking.payment_status == PAYMENT_STATUS_PAID

    def test_unknown_intent_is_acknowledged(self, db):
        result = process_stripe_webhook(payment_intent_event(SUCCEEDED, intent_id='pi_unknown'))

        assert result == ReconcileResult.UNKNOWN_INTENT
        assert WebhookLog.objects.get(event_id='evt_test_1').processed is True

    def test_sends_payment_email(self, pending_payment, django_capture_on_commit_callbacks, mailoutbox):
        with django_capture_on_commit_callbacks(execute=True):
            process_stripe_webhook(payment_intent_event(SUCCEEDED))

        assert len(mailoutbox) == 1
        assert mailoutbox[0].subject == 'Payment received - Haircut'


@pytest.mark.django_db
class TestPaymentFailed:

    def test_marks_booking_failed(self, pending_payment):
        event = payment_intent_event(FAILED, last_payment_error={'message': 'Your card was declined.'})

        assert process_stripe_webhook(event) == ReconcileResult.PROCESSED

        pending_payment.refresh_from_db()
        booking = pending_payment.booking
        booking.refresh_from_db()
        assert pending_payment.status == 'failed'
        assert pending_payment.error_message == 'Your card was declined.'
        assert booking.status == BOOKING_STATUS_PENDING
        assert booking.payment_status == PAYMENT_STATUS_FAILED

    def test_applied_points_are_kept(self, pending_payment, customer):
        CustomerLoyalty.objects.create(customer=customer, points=300)
        pending_payment.points_redeemed = 200
        pending_payment.save()

        process_stripe_webhook(payment_intent_event(FAILED))

        assert CustomerLoyalty.objects.get(customer=customer).points == 300

    def test_confirmed_booking_returns_to_pending(self, pending_payment):
        booking = pending_payment.booking
        booking.status = BOOKING_STATUS_CONFIRMED
        booking.save()

        process_stripe_webhook(payment_intent_event(FAILED))

        booking.refresh_from_db()
        assert booking.status == BOOKING_STATUS_PENDING

    def test_failure_after_success_is_ignored(self, pending_payment, customer):
        process_stripe_webhook(payment_intent_event(SUCCEEDED, event_id='evt_1'))

        result = process_stripe_webhook(payment_intent_event(FAILED, event_id='evt_2'))

        assert result == ReconcileResult.IGNORED
        pending_payment.refresh_from_db()
        booking = pending_payment.booking
        booking.refresh_from_db()
        assert pending_payment.status == 'succeeded'
        assert booking.status == BOOKING_STATUS_CONFIRMED
        assert booking.payment_status == PAYMENT_STATUS_PAID
        assert CustomerLoyalty.objects.get(customer=customer).points == 50

    def test_success_after_failure_is_applied(self, pending_payment):
        process_stripe_webhook(payment_intent_event(FAILED, event_id='evt_1'))

        result = process_stripe_webhook(payment_intent_event(SUCCEEDED, event_id='evt_2'))

        assert result == ReconcileResult.PROCESSED
        booking = pending_payment.booking
        booking.refresh_from_db()
        assert booking.payment_status == PAYMENT_STATUS_PAID


@pytest.mark.django_db
class TestPaymentCanceled:

    def test_cancels_open_transaction(self, pending_payment):
        assert process_stripe_webhook(payment_intent_event(CANCELED)) == ReconcileResult.PROCESSED

        pending_payment.refresh_from_db()
        assert pending_payment.status == 'canceled'
        assert pending_payment.booking.payment_status == PAYMENT_STATUS_PENDING

    def test_succeeded_intent_is_not_canceled(self, pending_payment):
        process_stripe_webhook(payment_intent_event(SUCCEEDED, event_id='evt_1'))

        result = process_stripe_webhook(payment_intent_event(CANCELED, event_id='evt_2'))

        assert result == ReconcileResult.IGNORED


@pytest.mark.django_db
class TestWebhookProcessing:

    def test_unhandled_event_type(self, db):
        event = {'id': 'evt_other', 'type': 'customer.created', 'data': {'object': {'id': 'cus_1'}}}

        assert process_stripe_webhook(event) == ReconcileResult.UNHANDLED

        log = WebhookLog.objects.get(event_id='evt_other')
        assert log.processed is True
        assert log.result == 'unhandled'

    def test_failure_rolls_back_and_can_be_retried(self, pending_payment, customer):
        event = payment_intent_event(SUCCEEDED)

        with mock.patch(
            'apps.payments.stripe_webhooks.loyalty_service.record_payment',
            side_effect=RuntimeError('database went away')
        ):
            with pytest.raises(RuntimeError):
                process_stripe_webhook(event)

        pending_payment.refresh_from_db()
        assert pending_payment.status == 'pending'
        assert pending_payment.booking.payment_status == PAYMENT_STATUS_PENDING
        log = WebhookLog.objects.get(event_id='evt_test_1')
        assert log.processed is False
        assert log.retry_count == 1

        assert process_stripe_webhook(event) == ReconcileResult.PROCESSED
        assert CustomerLoyalty.objects.get(customer=customer).points == 50


@pytest.mark.django_db
class TestStripeWebhookView:
    url = '/api/payments/webhooks/stripe/'

    def test_missing_signature(self, client):
        response = client.post(self.url, data='{}', content_type='application/json')

        assert response.status_code == 400

    def test_invalid_signature(self, client):
        response = client.post(
            self.url,
            data='{}',
            content_type='application/json',
            HTTP_STRIPE_SIGNATURE='t=1,v1=bad'
        )

        assert response.status_code == 400

    def test_rejects_get(self, client):
        assert client.get(self.url).status_code == 405

    def test_signed_event_is_processed(self, client, db):
        event = {'id': 'evt_signed', 'object': 'event', 'type': 'customer.created',
                 'data': {'object': {'id': 'cus_1', 'object': 'customer'}}}
        payload, signature = signed_payload(event, settings.STRIPE_WEBHOOK_SECRET)

        response = client.post(
            self.url,
            data=payload,
            content_type='application/json',
            HTTP_STRIPE_SIGNATURE=signature
        )

        assert response.status_code == 200
        assert WebhookLog.objects.filter(event_id='evt_signed', processed=True).exists()

    def test_processing_error_returns_500(self, client, pending_payment):
        event = payment_intent_event(SUCCEEDED)

        with mock.patch(
            'apps.payments.webhook_views.StripeClient.verify_webhook_signature',
            return_value=event
        ), mock.patch(
            'apps.payments.webhook_views.process_stripe_webhook',
            side_effect=RuntimeError('boom')
        ):
            response = client.post(
                self.url,
                data='{}',
                content_type='application/json',
                HTTP_STRIPE_SIGNATURE='t=1,v1=sig'
            )

        assert response.status_code == 500

    def test_signature_error_from_stripe(self, client):
        with mock.patch(
            'apps.payments.webhook_views.StripeClient.verify_webhook_signature',
            side_effect=stripe.SignatureVerificationError('No signatures found', 't=1,v1=sig')
        ):
            response = client.post(
                self.url,
                data='{}',
                content_type='application/json',
                HTTP_STRIPE_SIGNATURE='t=1,v1=sig'
            )

        assert response.status_code == 400
        assert not PaymentTransaction.objects.exists()
