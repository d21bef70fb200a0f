from rest_framework.routers import SimpleRouter
from . import views

app_name = 'services'

router = SimpleRouter()
router.register(r'', views.ServiceViewSet, basename='service')

urlpatterns = router.urls
