from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from listings.models import LeisureActivity, Property, Service

User = get_user_model()


class RecordingDispatcher:
    """Collects enqueued notifications instead of delivering them."""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def enqueue(self, recipient_user_id, type, payload):
        if type in self.fail_for:
            raise RuntimeError(f"delivery of {type} failed")
        self.sent.append((recipient_user_id, type, payload))

    def types(self):
        return [entry[1] for entry in self.sent]


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def failing_dispatcher():
    """Raises for every notification type."""
    return RecordingDispatcher(fail_for={"NEW_BOOKING", "BOOKING_CONFIRMED", "NEW_CONFIRMED_BOOKING", "COMMISSION"})


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def provider(db):
    return User.objects.create_user(
        username="provider@example.com",
        email="provider@example.com",
        password="examplepass",
        role=User.ROLE_PROVIDER,
    )


@pytest.fixture
def guest(db):
    return User.objects.create_user(
        username="guest@example.com",
        email="guest@example.com",
        password="examplepass",
    )


@pytest.fixture
def guest_client(guest):
    client = APIClient()
    client.force_authenticate(guest)
    return client


@pytest.fixture
def cottage(provider):
    return Property.objects.create(
        owner=provider,
        title="Harbour Cottage",
        address="1 Quay Street",
        max_guests=2,
        price=Decimal("100.00"),
        currency="GBP",
        cleaning_fee=Decimal("25.00"),
    )


@pytest.fixture
def chef_service(provider):
    return Service.objects.create(
        owner=provider,
        title="Private Chef",
        max_guests=3,
        price=Decimal("80.00"),
        currency="GBP",
    )


@pytest.fixture
def kayak_tour(provider):
    return LeisureActivity.objects.create(
        owner=provider,
        title="Kayak Tour",
        max_guests=6,
        price=Decimal("45.50"),
        currency="GBP",
    )
