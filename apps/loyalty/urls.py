from django.urls import path
from . import views

app_name = 'loyalty'

urlpatterns = [
    path('<uuid:customer_id>/', views.loyalty_detail, name='loyalty-detail'),
    path('<uuid:customer_id>/redeem-milestone/', views.redeem_milestone, name='redeem-milestone'),
]
