from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional
from uuid import uuid4

import stripe
from django.conf import settings

from core.money import to_minor_units


class PaymentGatewayError(Exception):
    """Raised when the payment provider refuses or fails to create an intent."""


@dataclass
class PaymentIntentStub:
    """
    Lightweight stand-in for stripe.PaymentIntent when running in stub mode.

    Tests and local development do not hit Stripe; instead we return predictable
    identifiers so the booking and webhook flows behave as if Stripe responded.
    """

    id: str
    client_secret: str
    status: str
    amount: int
    currency: str


def _get_stripe_api_key() -> Optional[str]:
    key = getattr(settings, "STRIPE_SECRET_KEY", "")
    return key or None


def _should_use_stub() -> bool:
    if getattr(settings, "STRIPE_USE_STUB", False):
        return True
    return _get_stripe_api_key() is None


def _stub_payment_intent(*, amount_minor: int, currency: str) -> PaymentIntentStub:
    intent_id = f"pi_test_{uuid4().hex}"
    return PaymentIntentStub(
        id=intent_id,
        client_secret=f"{intent_id}_secret_{uuid4().hex[:16]}",
        status="requires_payment_method",
        amount=amount_minor,
        currency=currency.lower(),
    )


def create_payment_intent(*, amount: Decimal, currency: str, metadata: Dict[str, str]):
    """
    Create a Stripe PaymentIntent (or stub equivalent) for a reservation.

    Returns an object exposing `id` and `client_secret`; the id is what the
    payment webhook later reports back and what the booking is matched on.
    """
    amount_minor = to_minor_units(amount, currency)
    if _should_use_stub():
        return _stub_payment_intent(amount_minor=amount_minor, currency=currency)

    stripe.api_key = _get_stripe_api_key()
    try:
        return stripe.PaymentIntent.create(
            amount=amount_minor,
            currency=currency.lower(),
            automatic_payment_methods={"enabled": True},
            metadata=metadata,
        )
    except stripe.StripeError as exc:
        raise PaymentGatewayError(str(exc)) from exc


def cancel_payment_intent(intent_id: str) -> None:
    """Cancel an intent whose reservation was refused after it was created."""
    if not intent_id or _should_use_stub():
        return

    stripe.api_key = _get_stripe_api_key()
    try:
        stripe.PaymentIntent.cancel(intent_id)
    except stripe.StripeError as exc:
        raise PaymentGatewayError(str(exc)) from exc
