"""
Loyalty models
"""
from django.db import models
from django.utils import timezone
from apps.core.models import BaseModel
from apps.core.utils.constants import (
    LOYALTY_TIERS,
    TIER_BRONZE,
    BADGE_CATEGORIES,
    MILESTONE_TYPES,
    REWARD_TYPES,
)


class CustomerLoyalty(BaseModel):
    """
    Running loyalty totals for one customer.
    Created on the first successful payment and only ever added to.
    """
    customer = models.OneToOneField(
        'customers.Customer',
        on_delete=models.CASCADE,
        related_name='loyalty'
    )
    points = models.PositiveIntegerField(default=0)
    total_spent = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total_bookings = models.PositiveIntegerField(default=0)
    tier = models.CharField(max_length=20, choices=LOYALTY_TIERS, default=TIER_BRONZE)
    last_activity = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'customer_loyalty'
        verbose_name = 'Customer Loyalty'
        verbose_name_plural = 'Customer Loyalty'
        ordering = ['-total_spent']

    def __str__(self):
        return f"{self.customer} - {self.tier} ({self.points} pts)"


class LoyaltyBadge(BaseModel):
    """Badge earned by a customer; each name is awarded once."""
    loyalty = models.ForeignKey(
        CustomerLoyalty,
        on_delete=models.CASCADE,
        related_name='badges'
    )
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=255, blank=True)
    icon = models.CharField(max_length=50, blank=True)
    category = models.CharField(max_length=20, choices=BADGE_CATEGORIES)
    earned_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'loyalty_badges'
        verbose_name = 'Loyalty Badge'
        verbose_name_plural = 'Loyalty Badges'
        ordering = ['earned_at']
        constraints = [
            models.UniqueConstraint(fields=['loyalty', 'name'], name='unique_loyalty_badge'),
        ]

    def __str__(self):
        return self.name


class LoyaltyMilestone(BaseModel):
    """Redeemable reward unlocked by crossing a booking or spending threshold."""
    loyalty = models.ForeignKey(
        CustomerLoyalty,
        on_delete=models.CASCADE,
        related_name='milestones'
    )
    name = models.CharField(max_length=100)
    milestone_type = models.CharField(max_length=20, choices=MILESTONE_TYPES)
    threshold = models.DecimalField(max_digits=12, decimal_places=2)
    reward_type = models.CharField(max_length=20, choices=REWARD_TYPES)
    reward_value = models.DecimalField(max_digits=10, decimal_places=2)
    achieved_at = models.DateTimeField(default=timezone.now)
    is_redeemed = models.BooleanField(default=False)
    redeemed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'loyalty_milestones'
        verbose_name = 'Loyalty Milestone'
        verbose_name_plural = 'Loyalty Milestones'
        ordering = ['achieved_at']
        constraints = [
            models.UniqueConstraint(fields=['loyalty', 'name'], name='unique_loyalty_milestone'),
        ]

    def __str__(self):
        return f"{self.name} ({self.reward_type} {self.reward_value})"
