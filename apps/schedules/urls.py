from django.urls import path
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'schedules'

router = SimpleRouter()
router.register(r'business-hours', views.BusinessHoursViewSet, basename='business-hours')
router.register(r'holidays', views.HolidayViewSet, basename='holiday')

urlpatterns = [
    path('available-slots/', views.available_slots, name='available-slots'),
] + router.urls
