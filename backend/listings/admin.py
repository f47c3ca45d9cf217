from django.contrib import admin

from .models import LeisureActivity, Property, Service


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("title", "owner", "max_guests", "price", "currency", "cleaning_fee", "is_active")
    list_filter = ("currency", "is_active")
    search_fields = ("title", "address", "owner__email")


@admin.register(Service, LeisureActivity)
class ListingAdmin(admin.ModelAdmin):
    list_display = ("title", "owner", "max_guests", "price", "currency", "is_active")
    list_filter = ("currency", "is_active")
    search_fields = ("title", "owner__email")
