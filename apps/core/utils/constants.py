"""
Application-wide constants
"""

# Booking statuses
BOOKING_STATUS_PENDING = 'pending'
BOOKING_STATUS_CONFIRMED = 'confirmed'
BOOKING_STATUS_CANCELLED = 'cancelled'
BOOKING_STATUS_POSTPONED = 'postponed'

BOOKING_STATUSES = [
    (BOOKING_STATUS_PENDING, 'Pending'),
    (BOOKING_STATUS_CONFIRMED, 'Confirmed'),
    (BOOKING_STATUS_CANCELLED, 'Cancelled'),
    (BOOKING_STATUS_POSTPONED, 'Postponed'),
]

# Booking payment statuses
PAYMENT_STATUS_PENDING = 'pending'
PAYMENT_STATUS_PAID = 'paid'
PAYMENT_STATUS_FAILED = 'failed'
PAYMENT_STATUS_REFUNDED = 'refunded'

PAYMENT_STATUSES = [
    (PAYMENT_STATUS_PENDING, 'Pending'),
    (PAYMENT_STATUS_PAID, 'Paid'),
    (PAYMENT_STATUS_FAILED, 'Failed'),
    (PAYMENT_STATUS_REFUNDED, 'Refunded'),
]

# Payment transaction statuses (mirror Stripe PaymentIntent outcomes)
TRANSACTION_STATUS_PENDING = 'pending'
TRANSACTION_STATUS_SUCCEEDED = 'succeeded'
TRANSACTION_STATUS_FAILED = 'failed'
TRANSACTION_STATUS_CANCELED = 'canceled'

TRANSACTION_STATUSES = [
    (TRANSACTION_STATUS_PENDING, 'Pending'),
    (TRANSACTION_STATUS_SUCCEEDED, 'Succeeded'),
    (TRANSACTION_STATUS_FAILED, 'Failed'),
    (TRANSACTION_STATUS_CANCELED, 'Canceled'),
]

# Days of week
DAYS_OF_WEEK = [
    ('monday', 'Monday'),
    ('tuesday', 'Tuesday'),
    ('wednesday', 'Wednesday'),
    ('thursday', 'Thursday'),
    ('friday', 'Friday'),
    ('saturday', 'Saturday'),
    ('sunday', 'Sunday'),
]

# Discount types
DISCOUNT_TYPE_PERCENTAGE = 'percentage'
DISCOUNT_TYPE_FIXED = 'fixed'

DISCOUNT_TYPES = [
    (DISCOUNT_TYPE_PERCENTAGE, 'Percentage'),
    (DISCOUNT_TYPE_FIXED, 'Fixed amount'),
]

# Loyalty tiers, lowest first
TIER_BRONZE = 'bronze'
TIER_SILVER = 'silver'
TIER_GOLD = 'gold'
TIER_PLATINUM = 'platinum'
TIER_DIAMOND = 'diamond'

LOYALTY_TIERS = [
    (TIER_BRONZE, 'Bronze'),
    (TIER_SILVER, 'Silver'),
    (TIER_GOLD, 'Gold'),
    (TIER_PLATINUM, 'Platinum'),
    (TIER_DIAMOND, 'Diamond'),
]

TIER_RANK = {tier: rank for rank, (tier, _label) in enumerate(LOYALTY_TIERS)}

# Loyalty milestone kinds
MILESTONE_TYPE_BOOKINGS = 'bookings'
MILESTONE_TYPE_SPENDING = 'spending'

MILESTONE_TYPES = [
    (MILESTONE_TYPE_BOOKINGS, 'Bookings'),
    (MILESTONE_TYPE_SPENDING, 'Spending'),
]

REWARD_TYPE_POINTS = 'points'
REWARD_TYPE_DISCOUNT = 'discount'

REWARD_TYPES = [
    (REWARD_TYPE_POINTS, 'Points'),
    (REWARD_TYPE_DISCOUNT, 'Discount'),
]

# Badge categories
BADGE_CATEGORY_TIER = 'tier'
BADGE_CATEGORY_MILESTONE = 'milestone'

BADGE_CATEGORIES = [
    (BADGE_CATEGORY_TIER, 'Tier'),
    (BADGE_CATEGORY_MILESTONE, 'Milestone'),
]

# Webhook sources
WEBHOOK_SOURCE_STRIPE = 'stripe'

WEBHOOK_SOURCES = [
    (WEBHOOK_SOURCE_STRIPE, 'Stripe'),
]

# Stripe event types
STRIPE_EVENT_PAYMENT_SUCCEEDED = 'payment_intent.succeeded'
STRIPE_EVENT_PAYMENT_FAILED = 'payment_intent.payment_failed'
STRIPE_EVENT_PAYMENT_CANCELED = 'payment_intent.canceled'

# Cache key prefixes
CACHE_KEY_AVAILABLE_SLOTS = 'available_slots'
