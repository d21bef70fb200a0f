"""
URL configuration for salon booking system.
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from apps.core.views import health_check

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),

    path('api/health/', health_check, name='health-check'),

    # API v1 endpoints
    path('api/v1/services/', include('apps.services.urls')),
    path('api/v1/schedules/', include('apps.schedules.urls')),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/discounts/', include('apps.discounts.urls')),
    path('api/v1/loyalty/', include('apps.loyalty.urls')),
    path('api/v1/payments/', include('apps.payments.api_urls')),

    # Webhooks (no version prefix for webhooks)
    path('api/payments/', include('apps.payments.urls')),
]
