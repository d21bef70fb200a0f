"""
Tests for discount validation and usage recording.
"""
from datetime import time, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.core.utils.constants import (
    BOOKING_STATUS_CANCELLED,
    DISCOUNT_TYPE_FIXED,
    DISCOUNT_TYPE_PERCENTAGE,
    PAYMENT_STATUS_PAID,
    TIER_GOLD,
    TIER_SILVER,
)
from apps.discounts.models import Discount, DiscountUsage
from apps.discounts.services.discount_service import (
    calculate_discount_amount,
    record_usage,
    validate_discount,
)
from apps.loyalty.models import CustomerLoyalty


@pytest.fixture
def save15(db):
    return Discount.objects.create(
        code='SAVE15',
        name='Save $15',
        discount_type=DISCOUNT_TYPE_FIXED,
        value=Decimal('15'),
        minimum_amount=Decimal('75'),
    )


def make_discount(**kwargs):
    defaults = {
        'code': 'PROMO',
        'name': 'Promo',
        'discount_type': DISCOUNT_TYPE_PERCENTAGE,
        'value': Decimal('10'),
    }
    defaults.update(kwargs)
    return Discount.objects.create(**defaults)


@pytest.mark.django_db
class TestValidateDiscount:

    def test_below_minimum_amount(self, save15):
        result = validate_discount('SAVE15', None, Decimal('50'))

        assert result.valid is False
        assert result.reason == 'minimum_amount'
        assert result.message == 'Minimum order amount of $75.00 required'
        assert result.amount == Decimal('0.00')

    def test_fixed_discount_applied(self, save15):
        result = validate_discount('SAVE15', None, Decimal('100'))

        assert result.valid is True
        assert result.amount == Decimal('15.00')
        assert result.final_amount == Decimal('85.00')

    def test_code_is_case_insensitive(self, save15):
        assert validate_discount('  save15 ', None, Decimal('100')).valid is True

    def test_unknown_code(self, db):
        result = validate_discount('NOPE', None, Decimal('100'))

        assert result.reason == 'invalid_code'
        assert result.message == 'Invalid discount code'

    def test_inactive_code_is_unknown(self, db):
        make_discount(is_active=False)

        assert validate_discount('PROMO', None, Decimal('100')).reason == 'invalid_code'

    def test_not_yet_active(self, db):
        make_discount(valid_from=timezone.now() + timedelta(days=1))

        assert validate_discount('PROMO', None, Decimal('100')).reason == 'not_yet_active'

    def test_expired(self, db):
        make_discount(valid_until=timezone.now() - timedelta(days=1))

        result = validate_discount('PROMO', None, Decimal('100'))

        assert result.reason == 'expired'
        assert result.message == 'Discount code has expired'

    def test_usage_limit_reached(self, db):
        make_discount(usage_limit=3, used_count=3)

        assert validate_discount('PROMO', None, Decimal('100')).reason == 'usage_limit_reached'

    def test_first_failing_check_is_reported(self, db):
        make_discount(
            valid_until=timezone.now() - timedelta(days=1),
            usage_limit=1,
            used_count=1,
            minimum_amount=Decimal('500'),
        )

        assert validate_discount('PROMO', None, Decimal('100')).reason == 'expired'

    def test_new_customers_only(self, customer, make_booking):
        make_discount(new_customers_only=True)
        make_booking(customer=customer, payment_status=PAYMENT_STATUS_PAID)

        result = validate_discount('PROMO', customer.id, Decimal('100'))

        assert result.reason == 'new_customers_only'

    def test_new_customers_only_ignores_booking_being_paid(self, customer, make_booking):
        make_discount(new_customers_only=True)
        booking = make_booking(customer=customer, payment_status=PAYMENT_STATUS_PAID)

        result = validate_discount('PROMO', customer.id, Decimal('100'), exclude_booking_id=booking.id)

        assert result.valid is True

    def test_unpaid_booking_makes_existing_customer(self, customer, make_booking):
        make_discount(existing_customers_only=True)
        make_booking(customer=customer)

        assert validate_discount('PROMO', customer.id, Decimal('100')).valid is True

    def test_new_customers_only_rejects_customer_with_pending_booking(self, customer, make_booking):
        make_discount(new_customers_only=True)
        make_booking(booking_time=time(9, 0), customer=customer)
        current = make_booking(booking_time=time(11, 0), customer=customer)

        result = validate_discount('PROMO', customer.id, Decimal('50'), exclude_booking_id=current.id)

        assert result.valid is False
        assert result.reason == 'new_customers_only'

    def test_cancelled_booking_does_not_make_existing_customer(self, customer, make_booking):
        make_discount(existing_customers_only=True)
        make_booking(customer=customer, status=BOOKING_STATUS_CANCELLED)

        assert validate_discount('PROMO', customer.id, Decimal('100')).reason == 'existing_customers_only'

    def test_unknown_customer_is_new(self, db):
        make_discount(existing_customers_only=True)

        assert validate_discount('PROMO', None, Decimal('100')).reason == 'existing_customers_only'

    def test_tier_required(self, customer):
        make_discount(min_tier=TIER_GOLD)
        CustomerLoyalty.objects.create(customer=customer, tier=TIER_SILVER)

        result = validate_discount('PROMO', customer.id, Decimal('100'))

        assert result.reason == 'tier_required'
        assert result.message == 'This discount requires Gold tier or higher'

    def test_tier_met(self, customer):
        make_discount(min_tier=TIER_SILVER)
        CustomerLoyalty.objects.create(customer=customer, tier=TIER_GOLD)

        assert validate_discount('PROMO', customer.id, Decimal('100')).valid is True

    def test_already_used(self, customer, make_booking):
        discount = make_discount()
        booking = make_booking(customer=customer, payment_status=PAYMENT_STATUS_PAID)
        DiscountUsage.objects.create(discount=discount, customer=customer, booking=booking, amount=Decimal('5'))

        assert validate_discount('PROMO', customer.id, Decimal('100')).reason == 'already_used'

    def test_validation_writes_nothing(self, save15):
        validate_discount('SAVE15', None, Decimal('100'))

        save15.refresh_from_db()
        assert save15.used_count == 0
        assert not DiscountUsage.objects.exists()


@pytest.mark.django_db
class TestCalculateDiscountAmount:

    def test_percentage(self):
        assert calculate_discount_amount(make_discount(value=Decimal('15')), Decimal('80')) == Decimal('12.00')

    def test_percentage_is_capped(self):
        discount = make_discount(value=Decimal('50'), max_discount=Decimal('20'))

        assert calculate_discount_amount(discount, Decimal('100')) == Decimal('20.00')

    def test_percentage_rounds_to_cents(self):
        discount = make_discount(value=Decimal('12.5'))

        assert calculate_discount_amount(discount, Decimal('33.33')) == Decimal('4.17')

    def test_fixed_never_exceeds_subtotal(self):
        discount = make_discount(discount_type=DISCOUNT_TYPE_FIXED, value=Decimal('40'))

        assert calculate_discount_amount(discount, Decimal('25')) == Decimal('25.00')

    def test_zero_subtotal(self):
        assert calculate_discount_amount(make_discount(), Decimal('0')) == Decimal('0.00')


@pytest.mark.django_db
class TestRecordUsage:

    def test_records_once_per_booking(self, save15, customer, make_booking):
        booking = make_booking(customer=customer)

        first = record_usage('SAVE15', customer, booking, Decimal('15.00'))
        second = record_usage('save15', customer, booking, Decimal('15.00'))

        assert first is not None
        assert second is None
        save15.refresh_from_db()
        assert save15.used_count == 1
        assert DiscountUsage.objects.filter(discount=save15).count() == 1

    def test_used_count_matches_usages(self, save15, customer, make_booking):
        for hour in (10, 11, 12):
            booking = make_booking(booking_time=time(hour, 0), customer=None)
            record_usage('SAVE15', None, booking, Decimal('15.00'))

        save15.refresh_from_db()
        assert save15.used_count == DiscountUsage.objects.filter(discount=save15).count() == 3

    def test_missing_code_is_skipped(self, db, make_booking):
        assert record_usage('GONE', None, make_booking(), Decimal('5')) is None


@pytest.mark.django_db
class TestValidateDiscountAPI:
    url = '/api/v1/discounts/validate/'

    def test_rejection_is_reported_in_body(self, api_client, save15):
        response = api_client.post(self.url, {'code': 'SAVE15', 'subtotal': '50.00'}, format='json')

        assert response.status_code == 200
        assert response.data['valid'] is False
        assert response.data['reason'] == 'minimum_amount'

    def test_valid_code(self, api_client, save15):
        response = api_client.post(self.url, {'code': 'save15', 'subtotal': '100.00'}, format='json')

        assert response.status_code == 200
        assert response.data['valid'] is True
        assert response.data['amount'] == '15.00'
        assert response.data['final_amount'] == '85.00'
