"""
Booking model
"""
from django.db import models
from django.db.models import Q
from apps.core.models import BaseModel
from apps.core.utils.constants import (
    BOOKING_STATUSES,
    BOOKING_STATUS_PENDING,
    BOOKING_STATUS_CANCELLED,
    PAYMENT_STATUSES,
    PAYMENT_STATUS_PENDING,
)


class BookingQuerySet(models.QuerySet):

    def active(self):
        """Bookings that hold their slot."""
        return self.exclude(status=BOOKING_STATUS_CANCELLED)

    def occupying(self, date, time):
        return self.active().filter(date=date, time=time)


class Booking(BaseModel):
    """
    Appointment in the salon's single shared calendar.

    At most one non-cancelled booking may exist per (date, time); the
    database constraint below is what enforces it.
    """
    service = models.ForeignKey(
        'services.Service',
        on_delete=models.PROTECT,
        related_name='bookings'
    )

    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='bookings'
    )

    # Slot
    date = models.DateField(db_index=True)
    time = models.TimeField()

    # Contact details
    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=20, blank=True)
    notes = models.TextField(blank=True)

    status = models.CharField(
        max_length=20,
        choices=BOOKING_STATUSES,
        default=BOOKING_STATUS_PENDING,
        db_index=True
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PAYMENT_STATUSES,
        default=PAYMENT_STATUS_PENDING,
        db_index=True
    )

    cancellation_reason = models.TextField(blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        db_table = 'bookings'
        verbose_name = 'Booking'
        verbose_name_plural = 'Bookings'
        ordering = ['-date', '-time']
        constraints = [
            models.UniqueConstraint(
                fields=['date', 'time'],
                condition=~Q(status=BOOKING_STATUS_CANCELLED),
                name='unique_active_booking_slot',
            ),
        ]
        indexes = [
            models.Index(fields=['customer', 'status']),
            models.Index(fields=['date', 'status']),
        ]

    def __str__(self):
        return f"{self.name} - {self.service.name} - {self.date} {self.time:%H:%M}"
