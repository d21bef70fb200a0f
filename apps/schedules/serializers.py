"""
Business hours and availability serializers
"""
from rest_framework import serializers

from .models import BusinessHours, Holiday


class BusinessHoursSerializer(serializers.ModelSerializer):
    """Serializer for BusinessHours model"""
    day_name = serializers.CharField(source='get_day_of_week_display', read_only=True)

    class Meta:
        model = BusinessHours
        fields = ['id', 'day_of_week', 'day_name', 'open_time', 'close_time', 'is_closed']
        read_only_fields = fields


class HolidaySerializer(serializers.ModelSerializer):
    """Serializer for Holiday model"""

    class Meta:
        model = Holiday
        fields = ['id', 'date', 'name', 'is_closed']
        read_only_fields = fields


class AvailableSlotsRequestSerializer(serializers.Serializer):
    """Query parameters for the available slots endpoint"""
    date = serializers.DateField(
        required=True,
        help_text="Target date to check availability (YYYY-MM-DD format)"
    )
    service_id = serializers.UUIDField(
        required=True,
        help_text="UUID of the service to check availability for"
    )


class AvailableSlotsResponseSerializer(serializers.Serializer):
    """Free slots for one service on one date"""
    date = serializers.DateField()
    service_id = serializers.UUIDField()
    is_open = serializers.BooleanField(help_text="Whether the salon is open on this date")
    available_slots = serializers.ListField(
        child=serializers.TimeField(format='%H:%M'),
        help_text="Free slot start times in ascending order"
    )
