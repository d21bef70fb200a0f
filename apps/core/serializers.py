"""
Core serializers
"""
from rest_framework import serializers


class ErrorResponseSerializer(serializers.Serializer):
    """Standard error response produced by the exception handler"""
    error = serializers.BooleanField(default=True)
    message = serializers.CharField()
    status_code = serializers.IntegerField()
    errors = serializers.DictField(required=False)


class HealthCheckSerializer(serializers.Serializer):
    """Health check response"""
    status = serializers.CharField()
    timestamp = serializers.DateTimeField()
    database = serializers.CharField()
    cache = serializers.CharField()
