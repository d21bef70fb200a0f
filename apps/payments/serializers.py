"""
Payment serializers
"""
from rest_framework import serializers
from .models import PaymentTransaction


class CreatePaymentIntentSerializer(serializers.Serializer):
    """Input serializer for creating a payment intent"""
    booking_id = serializers.UUIDField()
    discount_code = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=50)
    points_used = serializers.IntegerField(min_value=0, default=0)


class PaymentIntentResponseSerializer(serializers.Serializer):
    client_secret = serializers.CharField()
    payment_intent_id = serializers.CharField()
    transaction_id = serializers.UUIDField()
    subtotal = serializers.DecimalField(max_digits=10, decimal_places=2)
    discount_amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    discount_code = serializers.CharField(allow_null=True)
    points_used = serializers.IntegerField()
    points_value = serializers.DecimalField(max_digits=10, decimal_places=2)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    amount_cents = serializers.IntegerField()
    currency = serializers.CharField()
    points_to_earn = serializers.IntegerField()


class PaymentTransactionSerializer(serializers.ModelSerializer):

    class Meta:
        model = PaymentTransaction
        fields = [
            'id', 'booking', 'gateway_intent_id', 'amount', 'currency', 'status',
            'points_earned', 'points_redeemed', 'discount_applied', 'discount_code', 'processed_at', 'created_at'
        ]
        read_only_fields = fields
