from django.contrib import admin
from .models import BusinessHours, Holiday


@admin.register(BusinessHours)
class BusinessHoursAdmin(admin.ModelAdmin):
    list_display = ['day_of_week', 'open_time', 'close_time', 'is_closed']
    list_filter = ['is_closed']


@admin.register(Holiday)
class HolidayAdmin(admin.ModelAdmin):
    list_display = ['date', 'name', 'is_closed', 'created_at']
    search_fields = ['name']
    list_filter = ['is_closed']
    date_hierarchy = 'date'
