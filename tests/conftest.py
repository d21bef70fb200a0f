"""
Shared fixtures for the salon booking test suite.
"""
from datetime import time, timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from apps.bookings.models import Booking
from apps.core.utils.constants import DAYS_OF_WEEK
from apps.customers.models import Customer
from apps.payments.models import PaymentTransaction
from apps.schedules.models import BusinessHours
from apps.services.models import Service


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_client(db):
    user = get_user_model().objects.create_superuser(
        username='admin',
        email='admin@salon.local',
        password='admin-pass'
    )
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def service(db):
    return Service.objects.create(
        name='Haircut',
        description='Wash, cut and style',
        price=Decimal('50.00'),
        duration_minutes=30,
        category='hair'
    )


@pytest.fixture
def business_hours(db):
    """Open 09:00-17:00 every day of the week."""
    return [
        BusinessHours.objects.create(day_of_week=day, open_time=time(9, 0), close_time=time(17, 0))
        for day, _label in DAYS_OF_WEEK
    ]


@pytest.fixture
def booking_date(business_hours):
    """Next Monday, always in the future."""
    today = timezone.localdate()
    return today + timedelta(days=7 - today.weekday())


@pytest.fixture
def customer(db):
    return Customer.objects.create(name='Jane Doe', email='jane@example.com', phone='+15551234567')


@pytest.fixture
def make_booking(service, booking_date):
    def _make_booking(booking_time=time(10, 0), target_date=None, **kwargs):
        defaults = {
            'service': service,
            'date': target_date or booking_date,
            'time': booking_time,
            'name': 'Jane Doe',
            'email': 'jane@example.com',
        }
        defaults.update(kwargs)
        return Booking.objects.create(**defaults)
    return _make_booking


@pytest.fixture
def pending_payment(make_booking, customer):
    """A $50 booking with an open PaymentIntent."""
    booking = make_booking(customer=customer)
    return PaymentTransaction.objects.create(
        booking=booking,
        customer=customer,
        gateway_intent_id='pi_test_123',
        amount=Decimal('50.00'),
        currency='usd',
        points_earned=50,
    )
