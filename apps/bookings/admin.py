from django.contrib import admin
from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['name', 'service', 'date', 'time', 'status', 'payment_status']
    search_fields = ['name', 'email', 'phone', 'service__name']
    list_filter = ['status', 'payment_status', 'date', 'created_at']
    date_hierarchy = 'date'
    readonly_fields = ['cancelled_at', 'created_at', 'updated_at']
