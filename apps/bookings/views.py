"""
Booking views
"""
from rest_framework import viewsets, status, mixins
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAdminUser
from drf_spectacular.utils import extend_schema, OpenApiResponse, OpenApiExample
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.filters import OrderingFilter

from .models import Booking
from .serializers import (
    BookingSerializer,
    BookingListSerializer,
    BookingCreateSerializer,
    BookingCancelSerializer,
    BookingRescheduleSerializer,
)
from .services import booking_service


class BookingViewSet(viewsets.GenericViewSet,
                     mixins.ListModelMixin,
                     mixins.RetrieveModelMixin):
    """
    ViewSet for managing bookings.

    Customers create, view, cancel and reschedule bookings. Salon staff
    (Django admin users) list, confirm and postpone them.
    """
    queryset = Booking.objects.select_related('service', 'customer')
    permission_classes = [AllowAny]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_fields = ['status', 'payment_status', 'date', 'service']
    ordering_fields = ['date', 'time', 'created_at']
    ordering = ['date', 'time']

    def get_serializer_class(self):
        if self.action == 'list':
            return BookingListSerializer
        return BookingSerializer

    def get_permissions(self):
        """Set permissions based on action"""
        if self.action in ['list', 'confirm', 'postpone', 'mark_refunded']:
            return [IsAdminUser()]
        return super().get_permissions()

    @extend_schema(
        summary="List bookings",
        description="List all bookings (salon staff only)",
        responses={200: BookingListSerializer(many=True)},
        tags=['Bookings - Admin']
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(
        summary="Get booking details",
        responses={
            200: BookingSerializer,
            404: OpenApiResponse(description="Booking not found")
        },
        tags=['Bookings - Customer']
    )
    def retrieve(self, request, *args, **kwargs):
        return super().retrieve(request, *args, **kwargs)

    @extend_schema(
        summary="Create booking",
        description=(
            "Book a free slot. The booking starts as pending and is confirmed "
            "by a successful payment or by the salon."
        ),
        request=BookingCreateSerializer,
        examples=[
            OpenApiExample(
                'Booking Example',
                value={
                    'service_id': 'd241ec69-f739-4040-94a0-b46286742dbe',
                    'date': '2025-03-10',
                    'time': '10:00',
                    'name': 'Jane Doe',
                    'email': 'jane@example.com',
                    'phone': '+15551234567',
                    'notes': 'First visit'
                },
                request_only=True
            )
        ],
        responses={
            201: BookingSerializer,
            400: OpenApiResponse(description="Invalid data, past date or salon closed"),
            404: OpenApiResponse(description="Service not found"),
            409: OpenApiResponse(description="This time slot is already booked")
        },
        tags=['Bookings - Customer']
    )
    def create(self, request, *args, **kwargs):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = booking_service.create_booking(
            service_id=data['service_id'],
            target_date=data['date'],
            target_time=data['time'],
            contact=booking_service.ContactInfo(
                name=data['name'],
                email=data['email'],
                phone=data.get('phone', ''),
                notes=data.get('notes', ''),
            ),
            customer_id=data.get('customer_id'),
        )

        return Response(
            BookingSerializer(booking).data,
            status=status.HTTP_201_CREATED
        )

    @extend_schema(
        summary="Cancel booking",
        description="Cancel a booking and free its slot",
        request=BookingCancelSerializer,
        responses={
            200: BookingSerializer,
            400: OpenApiResponse(description="Booking is already cancelled"),
            404: OpenApiResponse(description="Booking not found")
        },
        tags=['Bookings - Customer']
    )
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = booking_service.cancel_booking(pk, serializer.validated_data.get('reason', ''))
        return Response(BookingSerializer(booking).data)

    @extend_schema(
        summary="Reschedule booking",
        description="Move a booking to another free slot. The booking returns to pending.",
        request=BookingRescheduleSerializer,
        responses={
            200: BookingSerializer,
            400: OpenApiResponse(description="Invalid slot or booking cannot be rescheduled"),
            404: OpenApiResponse(description="Booking not found"),
            409: OpenApiResponse(description="This time slot is already booked")
        },
        tags=['Bookings - Customer']
    )
    @action(detail=True, methods=['post'])
    def reschedule(self, request, pk=None):
        serializer = BookingRescheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = booking_service.reschedule_booking(
            pk,
            serializer.validated_data['date'],
            serializer.validated_data['time'],
        )
        return Response(BookingSerializer(booking).data)

    @extend_schema(
        summary="Confirm booking",
        description="Confirm a pending booking (salon staff only)",
        request=None,
        responses={
            200: BookingSerializer,
            400: OpenApiResponse(description="Only pending bookings can be confirmed"),
            403: OpenApiResponse(description="Forbidden"),
            404: OpenApiResponse(description="Booking not found")
        },
        tags=['Bookings - Admin']
    )
    @action(detail=True, methods=['post'])
    def confirm(self, request, pk=None):
        booking = booking_service.confirm_booking(pk)
        return Response(BookingSerializer(booking).data)

    @extend_schema(
        summary="Postpone booking",
        description="Postpone a pending or confirmed booking (salon staff only)",
        request=None,
        responses={
            200: BookingSerializer,
            400: OpenApiResponse(description="Booking cannot be postponed"),
            403: OpenApiResponse(description="Forbidden"),
            404: OpenApiResponse(description="Booking not found")
        },
        tags=['Bookings - Admin']
    )
    @action(detail=True, methods=['post'])
    def postpone(self, request, pk=None):
        booking = booking_service.postpone_booking(pk)
        return Response(BookingSerializer(booking).data)

    @extend_schema(
        summary="Mark booking refunded",
        description="Record a refund for a paid booking (salon staff only)",
        request=None,
        responses={
            200: BookingSerializer,
            400: OpenApiResponse(description="Booking is not paid"),
            403: OpenApiResponse(description="Forbidden"),
            404: OpenApiResponse(description="Booking not found")
        },
        tags=['Bookings - Admin']
    )
    @action(detail=True, methods=['post'], url_path='mark-refunded')
    def mark_refunded(self, request, pk=None):
        booking = booking_service.mark_refunded(pk)
        return Response(BookingSerializer(booking).data)
