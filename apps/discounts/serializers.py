"""
Discount serializers
"""
from rest_framework import serializers


class DiscountValidateRequestSerializer(serializers.Serializer):
    """Input serializer for discount validation"""
    code = serializers.CharField(max_length=50)
    subtotal = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    customer_id = serializers.UUIDField(required=False, allow_null=True)


class DiscountValidationSerializer(serializers.Serializer):
    """Result of a discount validation"""
    valid = serializers.BooleanField()
    code = serializers.CharField()
    subtotal = serializers.DecimalField(max_digits=10, decimal_places=2)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    final_amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    reason = serializers.CharField(allow_null=True)
    message = serializers.CharField()
