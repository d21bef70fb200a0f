"""
Custom exceptions and exception handler
"""
import logging

from django.db import OperationalError
from rest_framework.views import exception_handler
from rest_framework.exceptions import APIException
from rest_framework import status

logger = logging.getLogger(__name__)


class ServiceUnavailable(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Service temporarily unavailable, try again later.'
    default_code = 'service_unavailable'


class InvalidOperation(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid operation.'
    default_code = 'invalid_operation'


class ResourceConflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource conflict.'
    default_code = 'resource_conflict'


class SlotConflict(ResourceConflict):
    default_detail = 'This time slot is already booked'
    default_code = 'slot_conflict'


def custom_exception_handler(exc, context):
    """
    Custom exception handler that adds additional context.

    Database timeouts and lost connections are reported as 503 so clients
    know the request can be retried.
    """
    if isinstance(exc, OperationalError):
        logger.error(f"Database unavailable: {str(exc)}")
        exc = ServiceUnavailable()

    response = exception_handler(exc, context)

    if response is not None:
        detail = response.data.get('detail', str(exc)) if isinstance(response.data, dict) else str(exc)
        custom_response_data = {
            'error': True,
            'message': detail,
            'status_code': response.status_code,
        }

        # Add field errors if present
        if isinstance(response.data, dict) and 'detail' not in response.data:
            custom_response_data['errors'] = response.data
            custom_response_data['message'] = 'Validation failed.'
        elif isinstance(response.data, list):
            custom_response_data['errors'] = response.data
            custom_response_data['message'] = response.data[0] if response.data else str(exc)

        response.data = custom_response_data

    return response
