"""
Business hours and availability views
"""
from rest_framework import viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse, OpenApiTypes

from .models import BusinessHours, Holiday
from .serializers import (
    BusinessHoursSerializer,
    HolidaySerializer,
    AvailableSlotsRequestSerializer,
    AvailableSlotsResponseSerializer,
)
from .services.availability import get_available_slots, get_opening_window


class BusinessHoursViewSet(viewsets.ReadOnlyModelViewSet):
    """Weekly opening hours of the salon"""
    queryset = BusinessHours.objects.all()
    serializer_class = BusinessHoursSerializer
    permission_classes = [AllowAny]
    pagination_class = None

    @extend_schema(
        summary="List business hours",
        description="Get the opening hours for each day of the week. Days without an entry are closed.",
        responses={200: BusinessHoursSerializer(many=True)},
        tags=['Schedules - Public']
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)


class HolidayViewSet(viewsets.ReadOnlyModelViewSet):
    """Upcoming closures and special days"""
    queryset = Holiday.objects.all()
    serializer_class = HolidaySerializer
    permission_classes = [AllowAny]
    pagination_class = None

    @extend_schema(
        summary="List holidays",
        responses={200: HolidaySerializer(many=True)},
        tags=['Schedules - Public']
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)


@extend_schema(
    summary="Get available slots",
    description=(
        "Free 15-minute slots for a service on a date. Results may be up to "
        "a few seconds stale; booking creation re-checks the slot."
    ),
    parameters=[
        OpenApiParameter('date', OpenApiTypes.DATE, required=True, description='Target date (YYYY-MM-DD)'),
        OpenApiParameter('service_id', OpenApiTypes.UUID, required=True, description='Service UUID'),
    ],
    responses={
        200: AvailableSlotsResponseSerializer,
        400: OpenApiResponse(description="Invalid date or service_id"),
        404: OpenApiResponse(description="Service not found")
    },
    tags=['Schedules - Public']
)
@api_view(['GET'])
@permission_classes([AllowAny])
def available_slots(request):
    serializer = AvailableSlotsRequestSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)

    target_date = serializer.validated_data['date']
    service_id = serializer.validated_data['service_id']

    slots = get_available_slots(target_date, service_id)

    response = AvailableSlotsResponseSerializer({
        'date': target_date,
        'service_id': service_id,
        'is_open': get_opening_window(target_date) is not None,
        'available_slots': slots,
    })
    return Response(response.data)
