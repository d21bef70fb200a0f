"""
Business hours and holiday models
"""
from django.db import models
from apps.core.models import BaseModel
from apps.core.utils.constants import DAYS_OF_WEEK


class BusinessHours(BaseModel):
    """
    Opening window for one day of the week.

    A weekday without a row is treated as closed.
    """
    day_of_week = models.CharField(max_length=10, choices=DAYS_OF_WEEK, unique=True)
    open_time = models.TimeField()
    close_time = models.TimeField()
    is_closed = models.BooleanField(default=False)

    class Meta:
        db_table = 'business_hours'
        verbose_name = 'Business Hours'
        verbose_name_plural = 'Business Hours'
        ordering = ['day_of_week']

    def __str__(self):
        if self.is_closed:
            return f"{self.get_day_of_week_display()} - closed"
        return f"{self.get_day_of_week_display()} {self.open_time:%H:%M}-{self.close_time:%H:%M}"

    @property
    def is_open(self) -> bool:
        return not self.is_closed and self.open_time < self.close_time


class Holiday(BaseModel):
    """
    Date-specific exception to the weekly hours
    """
    date = models.DateField(unique=True)
    name = models.CharField(max_length=255)
    is_closed = models.BooleanField(default=True)

    class Meta:
        db_table = 'holidays'
        verbose_name = 'Holiday'
        verbose_name_plural = 'Holidays'
        ordering = ['date']

    def __str__(self):
        return f"{self.date} - {self.name}"
