"""
Customer model
"""
from django.db import models
from apps.core.models import BaseModel
from apps.core.validators import validate_phone_number


class Customer(BaseModel):
    """
    Customer identity shared by bookings, discount usage and loyalty
    """
    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, validators=[validate_phone_number], blank=True)

    class Meta:
        db_table = 'customers'
        verbose_name = 'Customer'
        verbose_name_plural = 'Customers'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} - {self.email}"
