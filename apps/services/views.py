"""
Service views
"""
from rest_framework import viewsets
from rest_framework.permissions import AllowAny
from rest_framework.filters import SearchFilter, OrderingFilter
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from django_filters.rest_framework import DjangoFilterBackend

from .models import Service
from .serializers import ServiceSerializer


class ServiceViewSet(viewsets.ReadOnlyModelViewSet):
    """Public catalogue of active services"""
    queryset = Service.objects.filter(is_active=True)
    serializer_class = ServiceSerializer
    permission_classes = [AllowAny]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_fields = ['category']
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'price', 'duration_minutes']
    ordering = ['name']

    @extend_schema(
        summary="List services",
        description="Get all active services offered by the salon.",
        parameters=[
            OpenApiParameter('category', str, description='Filter by category'),
            OpenApiParameter('search', str, description='Search in name and description'),
        ],
        responses={200: ServiceSerializer(many=True)},
        tags=['Services - Public']
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(
        summary="Get service details",
        description="Retrieve detailed information about a specific service",
        responses={
            200: ServiceSerializer,
            404: OpenApiResponse(description="Service not found")
        },
        tags=['Services - Public']
    )
    def retrieve(self, request, *args, **kwargs):
        return super().retrieve(request, *args, **kwargs)
