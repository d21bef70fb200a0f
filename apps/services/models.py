"""
Service model
"""
from django.db import models
from apps.core.models import BaseModel
from apps.core.validators import validate_positive_decimal, validate_duration


class Service(BaseModel):
    """
    Treatment offered by the salon.

    Duration is informational; bookings always occupy a single grid slot.
    """
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    # Pricing
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[validate_positive_decimal]
    )

    # Duration
    duration_minutes = models.IntegerField(validators=[validate_duration])

    # Category
    category = models.CharField(max_length=100, blank=True)

    # Status
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'services'
        verbose_name = 'Service'
        verbose_name_plural = 'Services'
        ordering = ['name']
        indexes = [
            models.Index(fields=['is_active']),
        ]

    def __str__(self):
        return f"{self.name} ({self.duration_minutes} min)"
