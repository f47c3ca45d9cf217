from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


class User(AbstractUser):
    ROLE_USER = "USER"
    ROLE_AGENT = "AGENT"
    ROLE_PROVIDER = "PROVIDER"
    ROLE_ADMIN = "ADMIN"
    ROLES = [
        (ROLE_USER, "User"),
        (ROLE_AGENT, "Agent"),
        (ROLE_PROVIDER, "Provider"),
        (ROLE_ADMIN, "Admin"),
    ]

    VERIFICATION_UNVERIFIED = "UNVERIFIED"
    VERIFICATION_PENDING = "PENDING"
    VERIFICATION_REQUIRES_INPUT = "REQUIRES_INPUT"
    VERIFICATION_VERIFIED = "VERIFIED"
    VERIFICATION_STATUSES = [
        (VERIFICATION_UNVERIFIED, "Unverified"),
        (VERIFICATION_PENDING, "Pending"),
        (VERIFICATION_REQUIRES_INPUT, "Requires input"),
        (VERIFICATION_VERIFIED, "Verified"),
    ]

    TIER_FREE = "FREE"
    TIER_PRO = "PRO"
    SUBSCRIPTION_TIERS = [
        (TIER_FREE, "Free"),
        (TIER_PRO, "Pro"),
    ]

    display_name = models.CharField(max_length=120, blank=True)
    role = models.CharField(max_length=20, choices=ROLES, default=ROLE_USER)

    is_verified = models.BooleanField(default=False)
    verification_status = models.CharField(
        max_length=20, choices=VERIFICATION_STATUSES, default=VERIFICATION_UNVERIFIED
    )
    verified_at = models.DateTimeField(null=True, blank=True)
    identity_session_id = models.CharField(max_length=255, blank=True)

    stripe_customer_id = models.CharField(max_length=255, blank=True, db_index=True)
    subscription_tier = models.CharField(max_length=10, choices=SUBSCRIPTION_TIERS, default=TIER_FREE)
    subscription_id = models.CharField(max_length=255, blank=True)
    subscription_status = models.CharField(max_length=30, blank=True)
    subscription_ends = models.DateTimeField(null=True, blank=True)
    subscription_updated_at = models.DateTimeField(null=True, blank=True)

    monthly_leisure_quota = models.PositiveIntegerField(default=3)
    has_analytics_access = models.BooleanField(default=False)
    has_crm_access = models.BooleanField(default=False)
    has_featured_listings = models.BooleanField(default=False)

    @property
    def is_agent(self) -> bool:
        return self.role == self.ROLE_AGENT

    @property
    def is_pro(self) -> bool:
        return self.subscription_tier == self.TIER_PRO

    def mark_verified(self, session_id: str = ""):
        self.is_verified = True
        self.verification_status = self.VERIFICATION_VERIFIED
        self.verified_at = self.verified_at or timezone.now()
        if session_id:
            self.identity_session_id = session_id
        self.save(
            update_fields=[
                "is_verified",
                "verification_status",
                "verified_at",
                "identity_session_id",
            ]
        )
