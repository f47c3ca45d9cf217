from django.contrib import admin

from .models import Commission


@admin.register(Commission)
class CommissionAdmin(admin.ModelAdmin):
    list_display = ("id", "property", "agent", "sale_amount", "agent_commission", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("agent__email", "property__title", "idempotency_key")
    readonly_fields = ("total_commission", "platform_fee", "agent_commission", "idempotency_key", "created_at")
