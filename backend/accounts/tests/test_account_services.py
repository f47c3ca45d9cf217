from datetime import datetime, timezone

import pytest
from django.contrib.auth import get_user_model

from accounts.services.subscriptions import activate_pro, downgrade_to_free, refresh_subscription
from accounts.services.verification import apply_verification_outcome

User = get_user_model()

RENEWAL = datetime(2031, 3, 1, tzinfo=timezone.utc)


@pytest.fixture
def user(db):
    return User.objects.create_user(username="member@example.com", email="member@example.com", password="x")


def test_activate_pro_applies_tier_limits(user):
    activate_pro(user, subscription_id="sub_1", renews_at=RENEWAL, customer_id="cus_1")

    user.refresh_from_db()
    assert user.is_pro
    assert user.subscription_id == "sub_1"
    assert user.subscription_status == "active"
    assert user.subscription_ends == RENEWAL
    assert user.stripe_customer_id == "cus_1"
    assert user.monthly_leisure_quota == 999999
    assert user.has_crm_access and user.has_featured_listings


def test_activate_pro_keeps_existing_customer_id(user):
    user.stripe_customer_id = "cus_original"
    user.save()

    activate_pro(user, subscription_id="sub_1", customer_id="cus_other")

    user.refresh_from_db()
    assert user.stripe_customer_id == "cus_original"


def test_refresh_keeps_tier_and_previous_renewal_when_missing(user):
    activate_pro(user, subscription_id="sub_1", renews_at=RENEWAL)

    refresh_subscription(user, status="past_due", renews_at=None)

    user.refresh_from_db()
    assert user.is_pro
    assert user.subscription_status == "past_due"
    assert user.subscription_ends == RENEWAL


def test_downgrade_clears_references(user):
    activate_pro(user, subscription_id="sub_1", renews_at=RENEWAL)

    downgrade_to_free(user)

    user.refresh_from_db()
    assert not user.is_pro
    assert user.subscription_id == ""
    assert user.subscription_ends is None
    assert user.subscription_status == "canceled"
    assert user.monthly_leisure_quota == 3
    assert not user.has_analytics_access


def test_verified_outcome_marks_user_verified(user):
    assert apply_verification_outcome(user, "verified", session_id="vs_1") is True

    user.refresh_from_db()
    assert user.is_verified
    assert user.verification_status == User.VERIFICATION_VERIFIED
    assert user.verified_at is not None
    assert user.identity_session_id == "vs_1"


def test_verified_user_is_not_downgraded(user):
    apply_verification_outcome(user, "verified", session_id="vs_1")

    assert apply_verification_outcome(user, "canceled", session_id="vs_2") is False

    user.refresh_from_db()
    assert user.verification_status == User.VERIFICATION_VERIFIED
    assert user.identity_session_id == "vs_1"


def test_unknown_outcome_changes_nothing(user):
    assert apply_verification_outcome(user, "exploded") is False

    user.refresh_from_db()
    assert user.verification_status == User.VERIFICATION_UNVERIFIED


def test_requires_input_then_verified(user):
    apply_verification_outcome(user, "requires_input", session_id="vs_1")
    user.refresh_from_db()
    assert user.verification_status == User.VERIFICATION_REQUIRES_INPUT
    assert not user.is_verified

    apply_verification_outcome(user, "verified", session_id="vs_1")
    user.refresh_from_db()
    assert user.is_verified
