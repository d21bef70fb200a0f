"""
Celery app initialization for the salon booking core.
This ensures the app is loaded when Django starts.
"""
from .celery import app as celery_app

__all__ = ('celery_app',)
