"""
Discounts app configuration
"""
from django.apps import AppConfig


class DiscountsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.discounts'
    verbose_name = 'Discounts'
