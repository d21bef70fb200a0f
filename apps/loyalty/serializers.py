"""
Loyalty serializers
"""
from rest_framework import serializers
from .models import CustomerLoyalty, LoyaltyBadge, LoyaltyMilestone


class LoyaltyBadgeSerializer(serializers.ModelSerializer):

    class Meta:
        model = LoyaltyBadge
        fields = ['name', 'description', 'icon', 'category', 'earned_at']


class LoyaltyMilestoneSerializer(serializers.ModelSerializer):

    class Meta:
        model = LoyaltyMilestone
        fields = [
            'name', 'milestone_type', 'threshold', 'reward_type',
            'reward_value', 'achieved_at', 'is_redeemed', 'redeemed_at'
        ]


class CustomerLoyaltySerializer(serializers.ModelSerializer):
    """Loyalty record with badges and milestones"""
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    badges = LoyaltyBadgeSerializer(many=True, read_only=True)
    milestones = LoyaltyMilestoneSerializer(many=True, read_only=True)

    class Meta:
        model = CustomerLoyalty
        fields = [
            'customer', 'customer_name', 'points', 'total_spent', 'total_bookings',
            'tier', 'last_activity', 'badges', 'milestones'
        ]
        read_only_fields = fields


class RedeemMilestoneSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
