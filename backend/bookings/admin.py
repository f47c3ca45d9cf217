from django.contrib import admin

from .models import Booking, ReservationLock


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "item_type", "item_id", "date", "guests", "status", "payment_status", "user")
    list_filter = ("status", "payment_status", "item_type")
    search_fields = ("user__email", "payment_intent_id")
    readonly_fields = ("payment_intent_id", "confirmed_at", "cancelled_at", "created_at", "updated_at")
    ordering = ("-date",)


@admin.register(ReservationLock)
class ReservationLockAdmin(admin.ModelAdmin):
    list_display = ("item_type", "item_id", "date", "created_at")
    list_filter = ("item_type",)
