from django.contrib import admin
from .models import EmailNotificationLog


@admin.register(EmailNotificationLog)
class EmailNotificationLogAdmin(admin.ModelAdmin):
    list_display = ['email_type', 'recipient_email', 'status', 'sent_at', 'created_at']
    search_fields = ['recipient_email', 'subject']
    list_filter = ['email_type', 'status']
    readonly_fields = ['created_at', 'updated_at', 'sent_at']
