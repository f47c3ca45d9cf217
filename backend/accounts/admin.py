from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("email", "display_name", "role", "subscription_tier", "verification_status", "is_staff")
    list_filter = ("role", "subscription_tier", "verification_status", "is_staff")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Marketplace", {"fields": ("display_name", "role")}),
        ("Verification", {"fields": ("is_verified", "verification_status", "verified_at", "identity_session_id")}),
        (
            "Subscription",
            {
                "fields": (
                    "stripe_customer_id",
                    "subscription_tier",
                    "subscription_id",
                    "subscription_status",
                    "subscription_ends",
                    "monthly_leisure_quota",
                    "has_analytics_access",
                    "has_crm_access",
                    "has_featured_listings",
                )
            },
        ),
    )
