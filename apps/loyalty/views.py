"""
Loyalty views
"""
from drf_spectacular.utils import extend_schema, OpenApiResponse
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .serializers import (
    CustomerLoyaltySerializer,
    LoyaltyMilestoneSerializer,
    RedeemMilestoneSerializer,
)
from .services import loyalty_service


@extend_schema(
    summary="Get loyalty status",
    description="Points, tier, badges and milestones for a customer",
    responses={
        200: CustomerLoyaltySerializer,
        404: OpenApiResponse(description="No loyalty record for this customer")
    },
    tags=['Loyalty - Customer']
)
@api_view(['GET'])
@permission_classes([AllowAny])
def loyalty_detail(request, customer_id):
    loyalty = loyalty_service.get_loyalty(customer_id)
    return Response(CustomerLoyaltySerializer(loyalty).data)


@extend_schema(
    summary="Redeem milestone",
    description="Redeem an unlocked milestone reward. Points rewards are added to the balance.",
    request=RedeemMilestoneSerializer,
    responses={
        200: LoyaltyMilestoneSerializer,
        400: OpenApiResponse(description="Milestone already redeemed"),
        404: OpenApiResponse(description="Milestone not found")
    },
    tags=['Loyalty - Customer']
)
@api_view(['POST'])
@permission_classes([AllowAny])
def redeem_milestone(request, customer_id):
    serializer = RedeemMilestoneSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    milestone = loyalty_service.redeem_milestone(customer_id, serializer.validated_data['name'])
    return Response(LoyaltyMilestoneSerializer(milestone).data)
