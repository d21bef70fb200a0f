from django.contrib import admin
from .models import Discount, DiscountUsage


class DiscountUsageInline(admin.TabularInline):
    model = DiscountUsage
    extra = 0
    can_delete = False
    readonly_fields = ['customer', 'booking', 'amount', 'used_at']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    list_display = [
        'code', 'name', 'discount_type', 'value', 'used_count',
        'usage_limit', 'valid_until', 'is_active'
    ]
    search_fields = ['code', 'name']
    list_filter = ['discount_type', 'is_active', 'min_tier']
    readonly_fields = ['used_count', 'created_at', 'updated_at']
    inlines = [DiscountUsageInline]


@admin.register(DiscountUsage)
class DiscountUsageAdmin(admin.ModelAdmin):
    list_display = ['discount', 'customer', 'booking', 'amount', 'used_at']
    search_fields = ['discount__code', 'customer__email']
    readonly_fields = ['discount', 'customer', 'booking', 'amount', 'used_at']

    def has_add_permission(self, request):
        """Usages are recorded when payments succeed."""
        return False
