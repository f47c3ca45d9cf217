from django.contrib import admin

from .models import ProcessedWebhookEvent


@admin.register(ProcessedWebhookEvent)
class ProcessedWebhookEventAdmin(admin.ModelAdmin):
    list_display = ("event_id", "event_type", "outcome", "object_id", "processed_at")
    list_filter = ("event_type", "outcome")
    search_fields = ("event_id", "object_id")
    readonly_fields = ("event_id", "event_type", "outcome", "object_id", "payload_sha256", "processed_at")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
