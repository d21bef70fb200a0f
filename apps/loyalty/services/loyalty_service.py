"""
Loyalty rewards engine.

Every successful payment adds points, spend and a booking to the
customer's totals, then re-derives the tier and awards any badges and
milestones that became due. Badges and milestones are keyed by name so
applying the same award twice changes nothing.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR
from typing import List, Optional
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from apps.core.exceptions import InvalidOperation
from apps.core.utils.constants import (
    TIER_BRONZE,
    TIER_SILVER,
    TIER_GOLD,
    TIER_PLATINUM,
    TIER_DIAMOND,
    TIER_RANK,
    BADGE_CATEGORY_TIER,
    BADGE_CATEGORY_MILESTONE,
    MILESTONE_TYPE_BOOKINGS,
    MILESTONE_TYPE_SPENDING,
    REWARD_TYPE_POINTS,
    REWARD_TYPE_DISCOUNT,
)
from apps.loyalty.models import CustomerLoyalty, LoyaltyBadge, LoyaltyMilestone

logger = logging.getLogger(__name__)


# Highest tier first: (tier, minimum bookings, minimum spend)
TIER_THRESHOLDS = [
    (TIER_DIAMOND, 50, Decimal('2000')),
    (TIER_PLATINUM, 30, Decimal('1000')),
    (TIER_GOLD, 15, Decimal('500')),
    (TIER_SILVER, 5, Decimal('200')),
    (TIER_BRONZE, 0, Decimal('0')),
]

TIER_BADGES = {
    TIER_SILVER: ('Silver Member', 'Reached Silver tier', 'medal-silver'),
    TIER_GOLD: ('Gold Member', 'Reached Gold tier', 'medal-gold'),
    TIER_PLATINUM: ('Platinum Member', 'Reached Platinum tier', 'crown'),
    TIER_DIAMOND: ('Diamond Member', 'Reached Diamond tier', 'gem'),
}

BOOKING_MILESTONES = [5, 10, 25, 50, 100]
SPENDING_MILESTONES = [100, 250, 500, 1000, 2000]

BIG_SPENDER_THRESHOLD = Decimal('500')


@dataclass(frozen=True)
class BadgeSpec:
    name: str
    description: str
    icon: str
    category: str


def tier_for(total_bookings: int, total_spent) -> str:
    """Highest tier whose booking and spend minimums are both met."""
    total_spent = Decimal(total_spent)
    for tier, min_bookings, min_spent in TIER_THRESHOLDS:
        if total_bookings >= min_bookings and total_spent >= min_spent:
            return tier
    return TIER_BRONZE


def points_for_amount(amount) -> int:
    """Points earned for a payment: floor(amount * LOYALTY_POINTS_PER_DOLLAR)."""
    rate = Decimal(str(settings.LOYALTY_POINTS_PER_DOLLAR))
    points = (Decimal(amount) * rate).to_integral_value(rounding=ROUND_FLOOR)
    return max(int(points), 0)


def milestone_badges_due(total_bookings: int, total_spent: Decimal) -> List[BadgeSpec]:
    badges = []
    if total_bookings == 1:
        badges.append(BadgeSpec('First Booking', 'Completed your first booking', 'star', BADGE_CATEGORY_MILESTONE))
    if total_bookings == 5:
        badges.append(BadgeSpec('Regular Customer', 'Completed 5 bookings', 'heart', BADGE_CATEGORY_MILESTONE))
    if total_bookings == 10:
        badges.append(BadgeSpec('Loyal Customer', 'Completed 10 bookings', 'trophy', BADGE_CATEGORY_MILESTONE))
    if total_spent >= BIG_SPENDER_THRESHOLD:
        badges.append(BadgeSpec('Big Spender', 'Spent $500 or more', 'diamond', BADGE_CATEGORY_MILESTONE))
    return badges


def _award_badge(loyalty: CustomerLoyalty, spec: BadgeSpec) -> Optional[LoyaltyBadge]:
    badge, created = LoyaltyBadge.objects.get_or_create(
        loyalty=loyalty,
        name=spec.name,
        defaults={
            'description': spec.description,
            'icon': spec.icon,
            'category': spec.category,
        }
    )
    if created:
        logger.info(f"Customer {loyalty.customer_id} earned badge '{spec.name}'")
        return badge
    return None


def _award_milestone(loyalty, name, milestone_type, threshold, reward_type, reward_value) -> Optional[LoyaltyMilestone]:
    milestone, created = LoyaltyMilestone.objects.get_or_create(
        loyalty=loyalty,
        name=name,
        defaults={
            'milestone_type': milestone_type,
            'threshold': threshold,
            'reward_type': reward_type,
            'reward_value': reward_value,
        }
    )
    if created:
        logger.info(f"Customer {loyalty.customer_id} reached milestone '{name}'")
        return milestone
    return None


def _award_reward_milestones(loyalty: CustomerLoyalty) -> None:
    for threshold in BOOKING_MILESTONES:
        if loyalty.total_bookings >= threshold:
            _award_milestone(
                loyalty,
                name=f"{threshold} Bookings",
                milestone_type=MILESTONE_TYPE_BOOKINGS,
                threshold=Decimal(threshold),
                reward_type=REWARD_TYPE_POINTS,
                reward_value=Decimal(threshold * 10),
            )

    for threshold in SPENDING_MILESTONES:
        if loyalty.total_spent >= threshold:
            _award_milestone(
                loyalty,
                name=f"${threshold} Spent",
                milestone_type=MILESTONE_TYPE_SPENDING,
                threshold=Decimal(threshold),
                reward_type=REWARD_TYPE_DISCOUNT,
                reward_value=min(Decimal(threshold) * Decimal('0.05'), Decimal('50')),
            )


def _lock_or_create(customer) -> CustomerLoyalty:
    CustomerLoyalty.objects.get_or_create(customer=customer)
    return CustomerLoyalty.objects.select_for_update().get(customer=customer)


def record_payment(customer, amount, points: Optional[int] = None) -> CustomerLoyalty:
    """
    Credit a successful payment to the customer's loyalty record.

    Must run inside the reconciler's transaction so the credit commits or
    rolls back together with the booking and discount updates.

    Args:
        customer: Customer who paid
        amount: Amount paid
        points: Points to credit; computed from amount when None
    """
    amount = Decimal(amount)
    if points is None:
        points = points_for_amount(amount)

    loyalty = _lock_or_create(customer)
    previous_tier = loyalty.tier

    loyalty.points += points
    loyalty.total_spent += amount
    loyalty.total_bookings += 1
    earned_tier = tier_for(loyalty.total_bookings, loyalty.total_spent)
    if TIER_RANK[earned_tier] > TIER_RANK[previous_tier]:
        loyalty.tier = earned_tier
    loyalty.last_activity = timezone.now()
    loyalty.save(update_fields=[
        'points', 'total_spent', 'total_bookings', 'tier', 'last_activity', 'updated_at'
    ])

    if TIER_RANK[loyalty.tier] > TIER_RANK[previous_tier]:
        logger.info(f"Customer {customer.id} moved from {previous_tier} to {loyalty.tier}")
        name, description, icon = TIER_BADGES[loyalty.tier]
        _award_badge(loyalty, BadgeSpec(name, description, icon, BADGE_CATEGORY_TIER))

    for spec in milestone_badges_due(loyalty.total_bookings, loyalty.total_spent):
        _award_badge(loyalty, spec)

    _award_reward_milestones(loyalty)

    logger.info(
        f"Loyalty updated for customer {customer.id}: +{points} points, "
        f"total {loyalty.points} points, tier {loyalty.tier}"
    )
    return loyalty


def get_loyalty(customer_id) -> CustomerLoyalty:
    """
    Loyalty record with badges and milestones.

    Raises:
        NotFound: The customer has no loyalty record yet
    """
    loyalty = (
        CustomerLoyalty.objects.select_related('customer')
        .prefetch_related('badges', 'milestones')
        .filter(customer_id=customer_id)
        .first()
    )
    if loyalty is None:
        raise NotFound('Loyalty record not found')
    return loyalty


@transaction.atomic
def redeem_milestone(customer_id, name: str) -> LoyaltyMilestone:
    """
    Redeem an unlocked milestone reward. Points rewards are credited to the
    balance; discount rewards are marked redeemed for the salon to honour.

    Raises:
        NotFound: Unknown customer loyalty record or milestone
        InvalidOperation: Milestone already redeemed
    """
    loyalty = CustomerLoyalty.objects.select_for_update().filter(customer_id=customer_id).first()
    if loyalty is None:
        raise NotFound('Loyalty record not found')

    milestone = LoyaltyMilestone.objects.select_for_update().filter(loyalty=loyalty, name=name).first()
    if milestone is None:
        raise NotFound('Milestone not found')
    if milestone.is_redeemed:
        raise InvalidOperation('Milestone already redeemed')

    milestone.is_redeemed = True
    milestone.redeemed_at = timezone.now()
    milestone.save(update_fields=['is_redeemed', 'redeemed_at', 'updated_at'])

    if milestone.reward_type == REWARD_TYPE_POINTS:
        loyalty.points += int(milestone.reward_value)
        loyalty.last_activity = timezone.now()
        loyalty.save(update_fields=['points', 'last_activity', 'updated_at'])

    logger.info(f"Customer {customer_id} redeemed milestone '{name}'")
    return milestone


def quote_points(customer_id, points: int) -> Decimal:
    """
    Dollar value of points applied to a payment, at
    LOYALTY_POINTS_REDEMPTION_RATE points per dollar. Nothing is deducted
    here; the points are spent when the payment succeeds.

    Raises:
        InvalidOperation: Not a whole multiple of the rate, or not enough points
    """
    rate = settings.LOYALTY_POINTS_REDEMPTION_RATE
    if points <= 0 or points % rate:
        raise InvalidOperation(f"Points must be redeemed in multiples of {rate}")

    balance = (
        CustomerLoyalty.objects.filter(customer_id=customer_id)
        .values_list('points', flat=True)
        .first()
    )
    if balance is None or balance < points:
        raise InvalidOperation('Insufficient points')

    return (Decimal(points) / Decimal(rate)).quantize(Decimal('0.01'))


def spend_points(customer, points: int) -> CustomerLoyalty:
    """
    Deduct points applied to a successful payment.

    Must run inside the reconciler's transaction. The payment has already
    been taken, so a balance spent elsewhere in the meantime is floored at
    zero and logged rather than rejected.
    """
    loyalty = _lock_or_create(customer)
    if loyalty.points < points:
        logger.warning(
            f"Customer {customer.id} applied {points} points but holds {loyalty.points}; "
            f"balance floored at zero"
        )
    loyalty.points = max(loyalty.points - points, 0)
    loyalty.last_activity = timezone.now()
    loyalty.save(update_fields=['points', 'last_activity', 'updated_at'])

    logger.info(f"Customer {customer.id} spent {points} points, {loyalty.points} left")
    return loyalty
