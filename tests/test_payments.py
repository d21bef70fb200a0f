"""
Tests for payment intent creation.
"""
from decimal import Decimal
from unittest import mock
import uuid

import pytest
import stripe
from rest_framework.exceptions import NotFound

from apps.core.exceptions import InvalidOperation, ServiceUnavailable
from apps.core.utils.constants import (
    BOOKING_STATUS_CANCELLED,
    DISCOUNT_TYPE_FIXED,
    PAYMENT_STATUS_FAILED,
    PAYMENT_STATUS_PAID,
)
from apps.customers.models import Customer
from apps.discounts.models import Discount
from apps.loyalty.models import CustomerLoyalty
from apps.payments.booking_payment_service import booking_payment_service
from apps.payments.events import cents_to_decimal, decimal_to_cents
from apps.payments.models import PaymentTransaction


def stripe_intent(intent_id):
    intent = mock.Mock()
    intent.id = intent_id
    intent.client_secret = f'{intent_id}_secret_abc'
    return intent


@pytest.fixture
def mock_stripe():
    with mock.patch('apps.payments.booking_payment_service.stripe_client') as client:
        client.create_payment_intent.return_value = stripe_intent('pi_test_123')
        yield client


@pytest.fixture
def welcome10(db):
    return Discount.objects.create(
        code='WELCOME10',
        name='Welcome',
        discount_type=DISCOUNT_TYPE_FIXED,
        value=Decimal('10'),
    )


def test_cent_conversion():
    assert decimal_to_cents(Decimal('42.50')) == 4250
    assert cents_to_decimal(4250) == Decimal('42.50')
    assert cents_to_decimal(None) == Decimal('0.00')


@pytest.mark.django_db
class TestCreatePaymentIntent:

    def test_creates_intent_and_transaction(self, make_booking, mock_stripe):
        booking = make_booking()

        result = booking_payment_service.create_payment_intent(booking.id)

        assert result['client_secret'] == 'pi_test_123_secret_abc'
        assert result['amount'] == Decimal('50.00')
        assert result['amount_cents'] == 5000
        assert result['points_to_earn'] == 50
        payment = PaymentTransaction.objects.get(gateway_intent_id='pi_test_123')
        assert payment.booking_id == booking.id
        assert payment.amount == Decimal('50.00')
        assert payment.status == 'pending'

        kwargs = mock_stripe.create_payment_intent.call_args.kwargs
        assert kwargs['amount'] == 5000
        assert kwargs['metadata']['booking_id'] == str(booking.id)

    def test_resolves_customer_from_contact(self, make_booking, mock_stripe):
        booking = make_booking(email='New.Client@Example.com', name='New Client')

        booking_payment_service.create_payment_intent(booking.id)

        customer = Customer.objects.get(email='new.client@example.com')
        booking.refresh_from_db()
        assert booking.customer == customer
        assert PaymentTransaction.objects.get().customer == customer

    def test_applies_discount(self, make_booking, mock_stripe, welcome10):
        booking = make_booking()

        result = booking_payment_service.create_payment_intent(booking.id, 'welcome10')

        assert result['discount_code'] == 'WELCOME10'
        assert result['discount_amount'] == Decimal('10.00')
        assert result['amount'] == Decimal('40.00')
        kwargs = mock_stripe.create_payment_intent.call_args.kwargs
        assert kwargs['amount'] == 4000
        assert kwargs['metadata']['discount_code'] == 'WELCOME10'
        welcome10.refresh_from_db()
        assert welcome10.used_count == 0

    def test_invalid_discount_rejected(self, make_booking, mock_stripe):
        booking = make_booking()

        with pytest.raises(InvalidOperation):
            booking_payment_service.create_payment_intent(booking.id, 'NOPE')

        mock_stripe.create_payment_intent.assert_not_called()

    def test_stripe_error_leaves_no_transaction(self, make_booking, mock_stripe):
        mock_stripe.create_payment_intent.side_effect = stripe.StripeError('Request timed out')
        booking = make_booking()

        with pytest.raises(ServiceUnavailable):
            booking_payment_service.create_payment_intent(booking.id)

        assert not PaymentTransaction.objects.exists()
        booking.refresh_from_db()
        assert booking.payment_status == 'pending'

    def test_retry_reuses_transaction(self, make_booking, mock_stripe):
        booking = make_booking()

        first = booking_payment_service.create_payment_intent(booking.id)
        second = booking_payment_service.create_payment_intent(booking.id)

        assert first['transaction_id'] == second['transaction_id']
        assert PaymentTransaction.objects.count() == 1

    def test_new_intent_cancels_superseded_one(self, make_booking, mock_stripe, welcome10,
                                               django_capture_on_commit_callbacks):
        mock_stripe.create_payment_intent.side_effect = [stripe_intent('pi_a'), stripe_intent('pi_b')]
        booking = make_booking()

        with django_capture_on_commit_callbacks(execute=True):
            booking_payment_service.create_payment_intent(booking.id)
            booking_payment_service.create_payment_intent(booking.id, 'WELCOME10')

        assert PaymentTransaction.objects.get(gateway_intent_id='pi_a').status == 'canceled'
        assert PaymentTransaction.objects.get(gateway_intent_id='pi_b').status == 'pending'
        mock_stripe.cancel_payment_intent.assert_called_once_with('pi_a')

    def test_gateway_cancel_error_is_tolerated(self, make_booking, mock_stripe,
                                               django_capture_on_commit_callbacks):
        mock_stripe.create_payment_intent.side_effect = [stripe_intent('pi_a'), stripe_intent('pi_b')]
        mock_stripe.cancel_payment_intent.side_effect = stripe.StripeError('Intent already succeeded')
        booking = make_booking()

        with django_capture_on_commit_callbacks(execute=True):
            booking_payment_service.create_payment_intent(booking.id)
            result = booking_payment_service.create_payment_intent(booking.id)

        assert result['payment_intent_id'] == 'pi_b'
        assert PaymentTransaction.objects.get(gateway_intent_id='pi_a').status == 'canceled'

    def test_failed_payment_can_be_retried(self, make_booking, mock_stripe):
        booking = make_booking(payment_status=PAYMENT_STATUS_FAILED)

        assert booking_payment_service.create_payment_intent(booking.id)['amount_cents'] == 5000

    def test_paid_booking_rejected(self, make_booking, mock_stripe):
        booking = make_booking(payment_status=PAYMENT_STATUS_PAID)

        with pytest.raises(InvalidOperation):
            booking_payment_service.create_payment_intent(booking.id)

    def test_cancelled_booking_rejected(self, make_booking, mock_stripe):
        booking = make_booking(status=BOOKING_STATUS_CANCELLED)

        with pytest.raises(InvalidOperation):
            booking_payment_service.create_payment_intent(booking.id)

    def test_unknown_booking(self, db, mock_stripe):
        with pytest.raises(NotFound):
            booking_payment_service.create_payment_intent(uuid.uuid4())


@pytest.mark.django_db
class TestLoyaltyPoints:

    @pytest.fixture
    def booking(self, make_booking, customer):
        CustomerLoyalty.objects.create(customer=customer, points=250)
        return make_booking(customer=customer)

    def test_points_reduce_the_total(self, booking, customer, mock_stripe):
        result = booking_payment_service.create_payment_intent(booking.id, points_used=200)

        assert result['points_used'] == 200
        assert result['points_value'] == Decimal('2.00')
        assert result['amount'] == Decimal('48.00')
        assert result['points_to_earn'] == 48
        kwargs = mock_stripe.create_payment_intent.call_args.kwargs
        assert kwargs['amount'] == 4800
        assert kwargs['metadata']['points_used'] == '200'
        assert PaymentTransaction.objects.get().points_redeemed == 200

    def test_points_are_not_deducted_before_payment(self, booking, customer, mock_stripe):
        booking_payment_service.create_payment_intent(booking.id, points_used=200)

        assert CustomerLoyalty.objects.get(customer=customer).points == 250

    def test_points_apply_after_discount(self, booking, mock_stripe, welcome10):
        result = booking_payment_service.create_payment_intent(booking.id, 'WELCOME10', points_used=100)

        assert result['discount_amount'] == Decimal('10.00')
        assert result['points_value'] == Decimal('1.00')
        assert result['amount'] == Decimal('39.00')

    @pytest.mark.parametrize('points', [150, 300])
    def test_unusable_points_rejected(self, booking, mock_stripe, points):
        with pytest.raises(InvalidOperation):
            booking_payment_service.create_payment_intent(booking.id, points_used=points)

        mock_stripe.create_payment_intent.assert_not_called()

    def test_points_cannot_exceed_amount_due(self, booking, customer, mock_stripe):
        CustomerLoyalty.objects.filter(customer=customer).update(points=10000)

        with pytest.raises(InvalidOperation):
            booking_payment_service.create_payment_intent(booking.id, points_used=6000)

    def test_customer_without_loyalty_record(self, make_booking, mock_stripe):
        booking = make_booking()

        with pytest.raises(InvalidOperation):
            booking_payment_service.create_payment_intent(booking.id, points_used=100)


@pytest.mark.django_db
class TestCreatePaymentIntentAPI:
    url = '/api/v1/payments/create-intent/'

    def test_create(self, api_client, make_booking, mock_stripe):
        booking = make_booking()

        response = api_client.post(self.url, {'booking_id': str(booking.id)}, format='json')

        assert response.status_code == 201
        assert response.data['payment_intent_id'] == 'pi_test_123'
        assert response.data['amount'] == '50.00'
        assert response.data['discount_code'] is None
        assert response.data['points_used'] == 0

    def test_create_with_points(self, api_client, make_booking, customer, mock_stripe):
        CustomerLoyalty.objects.create(customer=customer, points=120)
        booking = make_booking(customer=customer)

        response = api_client.post(
            self.url, {'booking_id': str(booking.id), 'points_used': 100}, format='json'
        )

        assert response.status_code == 201
        assert response.data['points_value'] == '1.00'
        assert response.data['amount'] == '49.00'

    def test_insufficient_points(self, api_client, make_booking, mock_stripe):
        booking = make_booking()

        response = api_client.post(
            self.url, {'booking_id': str(booking.id), 'points_used': 100}, format='json'
        )

        assert response.status_code == 400
        assert response.data['message'] == 'Insufficient points'

    def test_gateway_unavailable(self, api_client, make_booking, mock_stripe):
        mock_stripe.create_payment_intent.side_effect = stripe.StripeError('Request timed out')
        booking = make_booking()

        response = api_client.post(self.url, {'booking_id': str(booking.id)}, format='json')

        assert response.status_code == 503
        assert response.data['message'] == 'Payment provider unavailable, please try again.'

    def test_rejected_discount_message(self, api_client, make_booking, mock_stripe):
        booking = make_booking()

        response = api_client.post(
            self.url, {'booking_id': str(booking.id), 'discount_code': 'NOPE'}, format='json'
        )

        assert response.status_code == 400
        assert response.data['message'] == 'Invalid discount code'
