"""
Payment API URLs.
"""
from django.urls import path
from . import views

app_name = 'payments-api'

urlpatterns = [
    path('create-intent/', views.create_payment_intent, name='create-intent'),
]
