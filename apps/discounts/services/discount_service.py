"""
Discount validation and application.

Validation is read-only and runs its checks in a fixed order; the first
failing check is the one reported. Usage is recorded only by the payment
reconciler once the payment that consumed the code has succeeded.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
import logging

from django.db.models import F
from django.utils import timezone

from apps.bookings.models import Booking
from apps.core.utils.constants import (
    DISCOUNT_TYPE_PERCENTAGE,
    LOYALTY_TIERS,
    TIER_BRONZE,
    TIER_RANK,
)
from apps.discounts.models import Discount, DiscountUsage

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
ZERO = Decimal('0.00')

TIER_LABELS = dict(LOYALTY_TIERS)

# Reason codes
REASON_INVALID_CODE = 'invalid_code'
REASON_NOT_YET_ACTIVE = 'not_yet_active'
REASON_EXPIRED = 'expired'
REASON_USAGE_LIMIT = 'usage_limit_reached'
REASON_MINIMUM_AMOUNT = 'minimum_amount'
REASON_NEW_CUSTOMERS_ONLY = 'new_customers_only'
REASON_EXISTING_CUSTOMERS_ONLY = 'existing_customers_only'
REASON_TIER_REQUIRED = 'tier_required'
REASON_ALREADY_USED = 'already_used'


@dataclass(frozen=True)
class DiscountValidation:
    """Outcome of validating a code against a subtotal."""
    valid: bool
    code: str
    subtotal: Decimal
    amount: Decimal = ZERO
    final_amount: Optional[Decimal] = None
    reason: Optional[str] = None
    message: str = ''

    @classmethod
    def rejected(cls, code: str, subtotal: Decimal, reason: str, message: str) -> 'DiscountValidation':
        return cls(
            valid=False,
            code=code,
            subtotal=subtotal,
            amount=ZERO,
            final_amount=subtotal,
            reason=reason,
            message=message,
        )


def normalize_code(code: str) -> str:
    return (code or '').strip().upper()


def calculate_discount_amount(discount: Discount, subtotal: Decimal) -> Decimal:
    """
    Discount for a subtotal, rounded to cents and clamped to [0, subtotal].
    """
    subtotal = Decimal(subtotal)
    if subtotal <= 0:
        return ZERO

    if discount.discount_type == DISCOUNT_TYPE_PERCENTAGE:
        amount = subtotal * discount.value / Decimal('100')
        if discount.max_discount is not None:
            amount = min(amount, discount.max_discount)
    else:
        amount = min(discount.value, subtotal)

    amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    return max(ZERO, min(amount, subtotal))


def is_existing_customer(customer_id, exclude_booking_id=None) -> bool:
    """A customer is existing once they hold any non-cancelled booking besides the one being paid."""
    if customer_id is None:
        return False
    queryset = Booking.objects.active().filter(customer_id=customer_id)
    if exclude_booking_id is not None:
        queryset = queryset.exclude(id=exclude_booking_id)
    return queryset.exists()


def customer_tier(customer_id) -> str:
    from apps.loyalty.models import CustomerLoyalty

    if customer_id is None:
        return TIER_BRONZE
    tier = (
        CustomerLoyalty.objects.filter(customer_id=customer_id)
        .values_list('tier', flat=True)
        .first()
    )
    return tier or TIER_BRONZE


def validate_discount(code: str, customer_id, subtotal, exclude_booking_id=None) -> DiscountValidation:
    """
    Validate a discount code for a customer and subtotal.

    Checks, in order: code exists and is active, validity window, usage
    limit, minimum amount, new/existing customer restriction, minimum tier,
    and single use per customer. Nothing is written.

    Args:
        code: Discount code, case-insensitive
        customer_id: Customer UUID, or None for an unknown customer
        subtotal: Amount the discount applies to
        exclude_booking_id: Booking being paid for, ignored in history checks
    """
    code = normalize_code(code)
    subtotal = Decimal(subtotal).quantize(CENT, rounding=ROUND_HALF_UP)

    discount = Discount.objects.filter(code=code, is_active=True).first()
    if discount is None:
        return DiscountValidation.rejected(code, subtotal, REASON_INVALID_CODE, 'Invalid discount code')

    now = timezone.now()
    if discount.valid_from and now < discount.valid_from:
        return DiscountValidation.rejected(
            code, subtotal, REASON_NOT_YET_ACTIVE, 'Discount code is not yet active'
        )
    if discount.valid_until and now > discount.valid_until:
        return DiscountValidation.rejected(code, subtotal, REASON_EXPIRED, 'Discount code has expired')

    if discount.usage_limit is not None and discount.used_count >= discount.usage_limit:
        return DiscountValidation.rejected(
            code, subtotal, REASON_USAGE_LIMIT, 'Discount code usage limit reached'
        )

    if subtotal < discount.minimum_amount:
        return DiscountValidation.rejected(
            code,
            subtotal,
            REASON_MINIMUM_AMOUNT,
            f"Minimum order amount of ${discount.minimum_amount:.2f} required"
        )

    if discount.new_customers_only or discount.existing_customers_only:
        existing = is_existing_customer(customer_id, exclude_booking_id)
        if discount.new_customers_only and existing:
            return DiscountValidation.rejected(
                code, subtotal, REASON_NEW_CUSTOMERS_ONLY, 'This discount is only for new customers'
            )
        if discount.existing_customers_only and not existing:
            return DiscountValidation.rejected(
                code, subtotal, REASON_EXISTING_CUSTOMERS_ONLY,
                'This discount is only for existing customers'
            )

    if TIER_RANK[customer_tier(customer_id)] < TIER_RANK.get(discount.min_tier, 0):
        return DiscountValidation.rejected(
            code,
            subtotal,
            REASON_TIER_REQUIRED,
            f"This discount requires {TIER_LABELS[discount.min_tier]} tier or higher"
        )

    if customer_id is not None:
        used = DiscountUsage.objects.filter(discount=discount, customer_id=customer_id)
        if exclude_booking_id is not None:
            used = used.exclude(booking_id=exclude_booking_id)
        if used.exists():
            return DiscountValidation.rejected(
                code, subtotal, REASON_ALREADY_USED, 'You have already used this discount code'
            )

    amount = calculate_discount_amount(discount, subtotal)
    return DiscountValidation(
        valid=True,
        code=discount.code,
        subtotal=subtotal,
        amount=amount,
        final_amount=subtotal - amount,
        message='Discount applied',
    )


def record_usage(code: str, customer, booking, amount) -> Optional[DiscountUsage]:
    """
    Record that a paid booking consumed a discount code.

    Must run inside the caller's transaction. The discount row is locked so
    used_count moves by exactly one per booking; a second call for the same
    booking returns None and changes nothing.

    The payment has already been taken when this runs, so a code that went
    over its limit or was reused in the meantime is still recorded and a
    warning is logged.
    """
    code = normalize_code(code)
    discount = Discount.objects.select_for_update().filter(code=code).first()
    if discount is None:
        logger.warning(f"Discount {code} not found while recording usage for booking {booking.id}")
        return None

    if DiscountUsage.objects.filter(discount=discount, booking=booking).exists():
        logger.debug(f"Discount {code} usage already recorded for booking {booking.id}")
        return None

    if discount.usage_limit is not None and discount.used_count >= discount.usage_limit:
        logger.warning(
            f"Discount {code} used past its limit ({discount.usage_limit}) by booking {booking.id}"
        )
    if customer is not None and DiscountUsage.objects.filter(discount=discount, customer=customer).exists():
        logger.warning(f"Discount {code} used more than once by customer {customer.id}")

    usage = DiscountUsage.objects.create(
        discount=discount,
        customer=customer,
        booking=booking,
        amount=amount,
    )
    Discount.objects.filter(pk=discount.pk).update(used_count=F('used_count') + 1)

    logger.info(f"Recorded discount {code} usage of {amount} for booking {booking.id}")
    return usage
