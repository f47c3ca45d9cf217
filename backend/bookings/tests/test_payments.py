from decimal import Decimal
from types import SimpleNamespace

import pytest
import stripe

from bookings.services import payments


def test_stub_intent_when_no_secret_key(settings):
    settings.STRIPE_USE_STUB = False
    settings.STRIPE_SECRET_KEY = ""

    intent = payments.create_payment_intent(amount=Decimal("135.00"), currency="GBP", metadata={})

    assert isinstance(intent, payments.PaymentIntentStub)
    assert intent.id.startswith("pi_test_")
    assert intent.client_secret.startswith(f"{intent.id}_secret_")
    assert intent.amount == 13500
    assert intent.currency == "gbp"


def test_live_intent_uses_minor_units(settings, monkeypatch):
    settings.STRIPE_USE_STUB = False
    settings.STRIPE_SECRET_KEY = "sk_test_123"
    captured = {}

    def fake_create(**kwargs):
        captured.update(kwargs)
        return SimpleNamespace(id="pi_live_1", client_secret="pi_live_1_secret")

    monkeypatch.setattr("bookings.services.payments.stripe.PaymentIntent.create", fake_create)

    intent = payments.create_payment_intent(
        amount=Decimal("10.005"), currency="GBP", metadata={"itemId": "3"}
    )

    assert intent.id == "pi_live_1"
    assert captured["amount"] == 1001
    assert captured["currency"] == "gbp"
    assert captured["metadata"] == {"itemId": "3"}


def test_stripe_errors_become_gateway_errors(settings, monkeypatch):
    settings.STRIPE_USE_STUB = False
    settings.STRIPE_SECRET_KEY = "sk_test_123"

    def failing_create(**kwargs):
        raise stripe.StripeError("boom")

    monkeypatch.setattr("bookings.services.payments.stripe.PaymentIntent.create", failing_create)

    with pytest.raises(payments.PaymentGatewayError):
        payments.create_payment_intent(amount=Decimal("1"), currency="GBP", metadata={})


def test_cancel_is_a_no_op_in_stub_mode(settings, monkeypatch):
    settings.STRIPE_USE_STUB = True

    def unexpected_cancel(intent_id):
        raise AssertionError("Stripe should not be called")

    monkeypatch.setattr("bookings.services.payments.stripe.PaymentIntent.cancel", unexpected_cancel)

    payments.cancel_payment_intent("pi_test_abc")


def test_cancel_calls_stripe_when_live(settings, monkeypatch):
    settings.STRIPE_USE_STUB = False
    settings.STRIPE_SECRET_KEY = "sk_test_123"
    cancelled = []

    monkeypatch.setattr("bookings.services.payments.stripe.PaymentIntent.cancel", cancelled.append)

    payments.cancel_payment_intent("pi_live_9")

    assert cancelled == ["pi_live_9"]
