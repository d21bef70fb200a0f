"""
Slot availability service.

Slots are points on a fixed grid inside the salon's opening window for a
date. A slot is free unless a non-cancelled booking sits at exactly that
time. Results are cached briefly; the cache is never used to decide whether
a booking may be created.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional
from uuid import UUID
import logging

from django.conf import settings
from django.utils import timezone
from rest_framework.exceptions import NotFound

from apps.bookings.models import Booking
from apps.schedules.models import BusinessHours, Holiday
from apps.services.models import Service
from apps.core.utils.constants import BOOKING_STATUS_CANCELLED
from infrastructure.cache.redis_client import (
    redis_client,
    available_slots_key,
    available_slots_ttl,
    invalidate_available_slots,
)

logger = logging.getLogger(__name__)


# Map day names to Python weekday integers
DAYS_MAP = {
    'monday': 0,
    'tuesday': 1,
    'wednesday': 2,
    'thursday': 3,
    'friday': 4,
    'saturday': 5,
    'sunday': 6,
}

# Reverse mapping
WEEKDAY_TO_DAY = {v: k for k, v in DAYS_MAP.items()}


@dataclass(frozen=True)
class OpeningWindow:
    """Opening hours that apply to one calendar date."""
    day_of_week: str
    open_time: time
    close_time: time

    def contains(self, value: time) -> bool:
        return self.open_time <= value < self.close_time


def get_opening_window(target_date: date) -> Optional[OpeningWindow]:
    """
    Resolve the opening window for a date.

    Returns None when the salon is closed: a closed holiday, a weekday with no
    hours configured or marked closed, or a window where open >= close.
    """
    if Holiday.objects.filter(date=target_date, is_closed=True).exists():
        return None

    day_of_week = WEEKDAY_TO_DAY[target_date.weekday()]
    hours = BusinessHours.objects.filter(day_of_week=day_of_week).first()
    if hours is None or not hours.is_open:
        return None

    return OpeningWindow(
        day_of_week=day_of_week,
        open_time=hours.open_time,
        close_time=hours.close_time,
    )


def generate_grid(open_time: time, close_time: time, interval_minutes: int) -> List[time]:
    """Every grid point in [open_time, close_time)."""
    if interval_minutes <= 0 or open_time >= close_time:
        return []

    anchor = date.min
    current = datetime.combine(anchor, open_time)
    end = datetime.combine(anchor, close_time)
    step = timedelta(minutes=interval_minutes)

    points = []
    while current < end:
        points.append(current.time())
        current += step
    return points


class AvailabilityService:
    """
    Available slot calculator for one service on one date.

    Example usage:
        service = AvailabilityService(
            service_id=uuid,
            target_date=date(2024, 12, 10)
        )
        slots = service.get_available_slots()
    """

    def __init__(
        self,
        service_id: UUID,
        target_date: date,
        slot_interval_override: Optional[int] = None
    ):
        self.service_id = service_id
        self.target_date = target_date
        self.slot_interval_override = slot_interval_override

        # Fetched data (lazy loaded)
        self._service: Optional[Service] = None
        self._window_loaded = False
        self._window: Optional[OpeningWindow] = None

    @property
    def service(self) -> Service:
        """Fetch and cache the service instance."""
        if self._service is None:
            try:
                self._service = Service.objects.get(id=self.service_id, is_active=True)
            except (Service.DoesNotExist, ValueError):
                raise NotFound('Service not found')
        return self._service

    @property
    def slot_interval(self) -> int:
        return self.slot_interval_override or settings.SLOT_INTERVAL_MINUTES

    @property
    def opening_window(self) -> Optional[OpeningWindow]:
        if not self._window_loaded:
            self._window = get_opening_window(self.target_date)
            self._window_loaded = True
        return self._window

    def get_available_slots(self) -> List[time]:
        """
        Calculate the free grid points for the date, in ascending order.
        Dates before today have no free slots.
        """
        # Raises NotFound for unknown or inactive services
        self.service

        if self.target_date < timezone.localdate():
            return []

        window = self.opening_window
        if window is None:
            return []

        grid = generate_grid(window.open_time, window.close_time, self.slot_interval)
        occupied = self._get_occupied_times()
        return [slot for slot in grid if slot not in occupied]

    def _get_occupied_times(self) -> set:
        """Exact times held by non-cancelled bookings on the target date."""
        return set(
            Booking.objects.filter(date=self.target_date)
            .exclude(status=BOOKING_STATUS_CANCELLED)
            .values_list('time', flat=True)
        )


def get_available_slots(target_date: date, service_id) -> List[time]:
    """
    Cached entry point used by the API.

    Entries live for AVAILABLE_SLOTS_CACHE_TTL seconds and are dropped when a
    booking on that date is created, rescheduled or cancelled. The service
    is checked on every call so a deactivated service never serves a cached
    list.
    """
    availability = AvailabilityService(service_id=service_id, target_date=target_date)
    # Raises NotFound for unknown or inactive services
    availability.service

    key = available_slots_key(target_date, service_id)
    cached = redis_client.get(key)
    if cached is not None:
        logger.debug(f"Slot cache hit for {key}")
        return cached

    slots = availability.get_available_slots()
    redis_client.set(key, slots, available_slots_ttl())
    return slots


def invalidate_slots_for_dates(*dates) -> None:
    """Drop cached slot lists of every service for the given dates."""
    service_ids = list(Service.objects.values_list('id', flat=True))
    invalidate_available_slots([d for d in dates if d is not None], service_ids)
