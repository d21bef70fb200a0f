"""
Custom validators
"""
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _
import re


def validate_phone_number(value):
    """
    Validate phone number format
    """
    digits = re.sub(r'[\s\-().]', '', value)
    if not re.match(r'^\+?\d{7,15}$', digits):
        raise ValidationError(
            _('Phone number must contain 7 to 15 digits, optionally starting with "+".')
        )


def validate_positive_decimal(value):
    """
    Validate that decimal is positive
    """
    if value <= 0:
        raise ValidationError(
            _('Value must be greater than zero.')
        )


def validate_non_negative_decimal(value):
    if value < 0:
        raise ValidationError(
            _('Value cannot be negative.')
        )


def validate_duration(value):
    """
    Validate duration in minutes (must be positive and reasonable)
    """
    if value <= 0 or value > 480:  # Max 8 hours
        raise ValidationError(
            _('Duration must be between 1 and 480 minutes.')
        )
