"""
Discount models
"""
from django.db import models
from django.utils import timezone
from apps.core.models import BaseModel
from apps.core.validators import validate_positive_decimal, validate_non_negative_decimal
from apps.core.utils.constants import (
    DISCOUNT_TYPES,
    DISCOUNT_TYPE_PERCENTAGE,
    LOYALTY_TIERS,
    TIER_BRONZE,
)


class Discount(BaseModel):
    """
    Discount code.

    used_count always equals the number of DiscountUsage rows; both only
    change when a payment that used the code succeeds.
    """
    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    discount_type = models.CharField(
        max_length=20,
        choices=DISCOUNT_TYPES,
        default=DISCOUNT_TYPE_PERCENTAGE
    )
    value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[validate_positive_decimal],
        help_text='Percentage (0-100) or fixed amount depending on type'
    )
    max_discount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text='Cap for percentage discounts'
    )
    minimum_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        validators=[validate_non_negative_decimal]
    )

    # Usage
    usage_limit = models.PositiveIntegerField(null=True, blank=True)
    used_count = models.PositiveIntegerField(default=0)

    # Validity
    valid_from = models.DateTimeField(default=timezone.now)
    valid_until = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    # Eligibility
    new_customers_only = models.BooleanField(default=False)
    existing_customers_only = models.BooleanField(default=False)
    min_tier = models.CharField(max_length=20, choices=LOYALTY_TIERS, default=TIER_BRONZE)

    class Meta:
        db_table = 'discounts'
        verbose_name = 'Discount'
        verbose_name_plural = 'Discounts'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_active', 'valid_until']),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs):
        self.code = self.code.strip().upper()
        super().save(*args, **kwargs)


class DiscountUsage(BaseModel):
    """
    One consumption of a discount code by a paid booking.
    Append-only; (discount, booking) identifies a usage.
    """
    discount = models.ForeignKey(
        Discount,
        on_delete=models.PROTECT,
        related_name='usages'
    )
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='discount_usages'
    )
    booking = models.ForeignKey(
        'bookings.Booking',
        on_delete=models.PROTECT,
        related_name='discount_usages'
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    used_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'discount_usages'
        verbose_name = 'Discount Usage'
        verbose_name_plural = 'Discount Usages'
        ordering = ['-used_at']
        constraints = [
            models.UniqueConstraint(
                fields=['discount', 'booking'],
                name='unique_discount_usage_per_booking',
            ),
        ]
        indexes = [
            models.Index(fields=['discount', 'customer']),
        ]

    def __str__(self):
        return f"{self.discount.code} - {self.amount} on {self.booking_id}"
