"""
Customer lookup helpers
"""
import logging

from rest_framework.exceptions import NotFound

from .models import Customer

logger = logging.getLogger(__name__)


def get_customer(customer_id) -> Customer:
    try:
        return Customer.objects.get(id=customer_id)
    except (Customer.DoesNotExist, ValueError):
        raise NotFound('Customer not found')


def resolve_customer_for_contact(name: str, email: str, phone: str = '') -> Customer:
    """
    Find the customer owning an email address, creating one on first contact.

    Emails are compared case-insensitively and stored lower-case.
    """
    email = email.strip().lower()
    customer = Customer.objects.filter(email__iexact=email).first()
    if customer:
        return customer

    customer, created = Customer.objects.get_or_create(
        email=email,
        defaults={'name': name, 'phone': phone or ''}
    )
    if created:
        logger.info(f"Created customer {customer.id} for {email}")
    return customer
