from django.contrib import admin
from .models import CustomerLoyalty, LoyaltyBadge, LoyaltyMilestone


class LoyaltyBadgeInline(admin.TabularInline):
    model = LoyaltyBadge
    extra = 0
    readonly_fields = ['name', 'description', 'icon', 'category', 'earned_at']


class LoyaltyMilestoneInline(admin.TabularInline):
    model = LoyaltyMilestone
    extra = 0
    readonly_fields = [
        'name', 'milestone_type', 'threshold', 'reward_type',
        'reward_value', 'achieved_at', 'is_redeemed', 'redeemed_at'
    ]


@admin.register(CustomerLoyalty)
class CustomerLoyaltyAdmin(admin.ModelAdmin):
    list_display = ['customer', 'tier', 'points', 'total_bookings', 'total_spent', 'last_activity']
    search_fields = ['customer__name', 'customer__email']
    list_filter = ['tier']
    readonly_fields = ['points', 'total_spent', 'total_bookings', 'tier', 'last_activity']
    inlines = [LoyaltyBadgeInline, LoyaltyMilestoneInline]
