"""
Payment views
"""
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.core.serializers import ErrorResponseSerializer
from .booking_payment_service import booking_payment_service
from .serializers import CreatePaymentIntentSerializer, PaymentIntentResponseSerializer


@extend_schema(
    summary="Create payment intent",
    description=(
        "Create a Stripe PaymentIntent for a booking, optionally applying a "
        "discount code and loyalty points (100 points = $1, deducted once the "
        "payment succeeds). Use the client_secret with Stripe.js to complete payment; "
        "the booking is confirmed when Stripe reports the payment succeeded."
    ),
    request=CreatePaymentIntentSerializer,
    responses={
        201: PaymentIntentResponseSerializer,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
        503: ErrorResponseSerializer
    },
    tags=['Payments - Customer']
)
@api_view(['POST'])
@permission_classes([AllowAny])
def create_payment_intent(request):
    serializer = CreatePaymentIntentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = booking_payment_service.create_payment_intent(
        booking_id=serializer.validated_data['booking_id'],
        discount_code=serializer.validated_data.get('discount_code') or None,
        points_used=serializer.validated_data['points_used'],
    )
    return Response(PaymentIntentResponseSerializer(result).data, status=status.HTTP_201_CREATED)
