from rest_framework.routers import SimpleRouter
from . import views

app_name = 'bookings'

router = SimpleRouter()
router.register(r'', views.BookingViewSet, basename='booking')

urlpatterns = router.urls
