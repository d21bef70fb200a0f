"""
Discount views
"""
from drf_spectacular.utils import extend_schema, OpenApiExample
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .serializers import DiscountValidateRequestSerializer, DiscountValidationSerializer
from .services.discount_service import validate_discount


@extend_schema(
    summary="Validate discount code",
    description=(
        "Check whether a code applies to a subtotal and preview the discount. "
        "Validation does not reserve the code; usage is recorded when the "
        "payment succeeds. Rejections carry a reason code and message."
    ),
    request=DiscountValidateRequestSerializer,
    examples=[
        OpenApiExample(
            'Validate Example',
            value={'code': 'SAVE15', 'subtotal': '100.00'},
            request_only=True
        )
    ],
    responses={200: DiscountValidationSerializer},
    tags=['Discounts - Public']
)
@api_view(['POST'])
@permission_classes([AllowAny])
def validate_discount_code(request):
    serializer = DiscountValidateRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = validate_discount(
        code=serializer.validated_data['code'],
        customer_id=serializer.validated_data.get('customer_id'),
        subtotal=serializer.validated_data['subtotal'],
    )
    return Response(DiscountValidationSerializer(result).data)
