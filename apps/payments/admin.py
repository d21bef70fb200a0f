"""
Payment app admin interface.
"""
from django.contrib import admin
from .models import PaymentTransaction, WebhookLog


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    """Admin interface for payment transactions (read-only)."""
    list_display = ['gateway_intent_id', 'booking', 'amount', 'currency', 'status', 'processed_at']
    list_filter = ['status', 'currency', 'created_at']
    search_fields = ['gateway_intent_id', 'booking__email', 'discount_code']
    readonly_fields = [
        'booking', 'customer', 'gateway_intent_id', 'amount', 'currency', 'status',
        'points_earned', 'points_redeemed', 'discount_applied', 'discount_code', 'error_message',
        'processed_at', 'created_at', 'updated_at'
    ]
    ordering = ['-created_at']

    def has_add_permission(self, request):
        """Transactions are created with their payment intent."""
        return False


@admin.register(WebhookLog)
class WebhookLogAdmin(admin.ModelAdmin):
    """Admin interface for webhook logs (read-only)."""
    list_display = [
        'source', 'event_type', 'event_id', 'processed', 'result',
        'retry_count', 'created_at'
    ]
    list_filter = ['source', 'processed', 'event_type', 'created_at']
    search_fields = ['event_id', 'event_type', 'error_message']
    readonly_fields = [
        'source', 'event_type', 'event_id', 'payload',
        'processed', 'result', 'error_message', 'processing_time',
        'retry_count', 'last_retry_at', 'created_at', 'updated_at'
    ]
    ordering = ['-created_at']

    def has_add_permission(self, request):
        """Webhooks are created automatically."""
        return False

    def has_delete_permission(self, request, obj=None):
        """Allow deleting old logs for cleanup."""
        return request.user.is_superuser

    fieldsets = (
        ('Webhook Details', {
            'fields': ('source', 'event_type', 'event_id')
        }),
        ('Processing', {
            'fields': ('processed', 'result', 'error_message', 'processing_time', 'retry_count', 'last_retry_at')
        }),
        ('Payload', {
            'fields': ('payload',),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
