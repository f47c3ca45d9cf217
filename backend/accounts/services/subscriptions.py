from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from django.utils import timezone

from accounts.models import User

FREE_TIER_LIMITS: Dict[str, Any] = {
    "monthly_leisure_quota": 3,
    "has_featured_listings": False,
    "has_analytics_access": False,
    "has_crm_access": False,
}

PRO_TIER_LIMITS: Dict[str, Any] = {
    "monthly_leisure_quota": 999999,
    "has_featured_listings": True,
    "has_analytics_access": True,
    "has_crm_access": True,
}

TIER_LIMITS = {
    User.TIER_FREE: FREE_TIER_LIMITS,
    User.TIER_PRO: PRO_TIER_LIMITS,
}


def _apply_tier(user: User, tier: str) -> list[str]:
    user.subscription_tier = tier
    changed = ["subscription_tier"]
    for field, value in TIER_LIMITS[tier].items():
        setattr(user, field, value)
        changed.append(field)
    return changed


def activate_pro(
    user: User,
    *,
    subscription_id: str,
    status: str = "active",
    renews_at: Optional[datetime] = None,
    customer_id: str = "",
) -> None:
    """FREE -> PRO when a subscription is created."""
    changed = _apply_tier(user, User.TIER_PRO)
    user.subscription_id = subscription_id
    user.subscription_status = status
    user.subscription_ends = renews_at
    user.subscription_updated_at = timezone.now()
    changed += ["subscription_id", "subscription_status", "subscription_ends", "subscription_updated_at"]
    if customer_id and not user.stripe_customer_id:
        user.stripe_customer_id = customer_id
        changed.append("stripe_customer_id")
    user.save(update_fields=changed)


def refresh_subscription(
    user: User,
    *,
    status: str,
    renews_at: Optional[datetime],
    subscription_id: str = "",
) -> None:
    """Keep the tier, refresh status and renewal date."""
    user.subscription_status = status
    if renews_at is not None:
        user.subscription_ends = renews_at
    if subscription_id:
        user.subscription_id = subscription_id
    user.subscription_updated_at = timezone.now()
    user.save(
        update_fields=[
            "subscription_status",
            "subscription_ends",
            "subscription_id",
            "subscription_updated_at",
        ]
    )


def downgrade_to_free(user: User) -> None:
    """PRO -> FREE and clear the external subscription references."""
    changed = _apply_tier(user, User.TIER_FREE)
    user.subscription_id = ""
    user.subscription_status = "canceled"
    user.subscription_ends = None
    user.subscription_updated_at = timezone.now()
    changed += ["subscription_id", "subscription_status", "subscription_ends", "subscription_updated_at"]
    user.save(update_fields=changed)
