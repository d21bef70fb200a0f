"""
Booking serializers
"""
from rest_framework import serializers
from .models import Booking


class BookingSerializer(serializers.ModelSerializer):
    """Detailed booking serializer for output"""
    service_name = serializers.CharField(source='service.name', read_only=True)
    service_price = serializers.DecimalField(
        source='service.price',
        max_digits=10,
        decimal_places=2,
        read_only=True
    )
    service_duration = serializers.IntegerField(
        source='service.duration_minutes',
        read_only=True
    )
    time = serializers.TimeField(format='%H:%M', read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id', 'service', 'service_name', 'service_price', 'service_duration',
            'customer', 'date', 'time', 'name', 'email', 'phone', 'notes',
            'status', 'payment_status', 'cancellation_reason', 'cancelled_at',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class BookingListSerializer(serializers.ModelSerializer):
    """Simplified booking serializer for lists"""
    service_name = serializers.CharField(source='service.name', read_only=True)
    time = serializers.TimeField(format='%H:%M', read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id', 'name', 'service_name', 'date', 'time',
            'status', 'payment_status', 'created_at'
        ]


class BookingCreateSerializer(serializers.Serializer):
    """Input serializer for creating bookings"""
    service_id = serializers.UUIDField()
    date = serializers.DateField()
    time = serializers.TimeField(input_formats=['%H:%M', '%H:%M:%S'])
    customer_id = serializers.UUIDField(required=False, allow_null=True)
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    phone = serializers.CharField(required=False, allow_blank=True, max_length=20)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=500)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value


class BookingCancelSerializer(serializers.Serializer):
    """Input serializer for cancelling bookings"""
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500)


class BookingRescheduleSerializer(serializers.Serializer):
    """Input serializer for rescheduling bookings"""
    date = serializers.DateField()
    time = serializers.TimeField(input_formats=['%H:%M', '%H:%M:%S'])
