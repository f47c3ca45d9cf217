"""
Applies Stripe webhook events to the booking ledger and user state.

Every event goes through the same steps: verify the signature over the raw
body, parse, skip if the event id already has a ProcessedWebhookEvent marker,
then apply the transition and write the marker in one transaction. Stripe
delivers at least once, so a second delivery of the same event must be a
no-op that still answers 200.
"""
from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

import stripe
from django.db import DatabaseError, IntegrityError, transaction

from accounts.models import User
from accounts.services.subscriptions import activate_pro, downgrade_to_free, refresh_subscription
from accounts.services.verification import apply_verification_outcome
from bookings.models import Booking
from core.results import ErrorKind, Failure, Ok, Result
from listings.models import resolve_item
from notifications.dispatch import (
    NotificationDispatcher,
    OutgoingNotification,
    fan_out,
    get_dispatcher,
)
from notifications.models import Notification
from payments.models import ProcessedWebhookEvent

logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
SUBSCRIPTION_CREATED = "customer.subscription.created"
SUBSCRIPTION_UPDATED = "customer.subscription.updated"
SUBSCRIPTION_DELETED = "customer.subscription.deleted"
IDENTITY_PREFIX = "identity.verification_session."
IDENTITY_COMPLETED = IDENTITY_PREFIX + "completed"
IDENTITY_EVENTS = tuple(
    IDENTITY_PREFIX + outcome
    for outcome in ("verified", "requires_input", "canceled", "processing", "completed")
)

# Reconcile outcomes reported back to the caller.
APPLIED = "applied"
UNMATCHED = "unmatched"
DUPLICATE = "duplicate"
IGNORED = "ignored"


@dataclass
class AppliedChange:
    outcome: str
    object_id: str = ""
    notifications: List[OutgoingNotification] = field(default_factory=list)


Handler = Callable[[Mapping[str, Any]], AppliedChange]


class WebhookReconciler:
    """
    One instance per endpoint secret.

    `event_types` limits which kinds this endpoint acts on; anything else is
    acknowledged without a marker.
    """

    def __init__(
        self,
        *,
        secret: str,
        dispatcher: Optional[NotificationDispatcher] = None,
        tolerance: Optional[int] = 300,
        event_types: Optional[tuple] = None,
    ):
        self.secret = secret
        self.dispatcher = dispatcher or get_dispatcher()
        self.tolerance = tolerance
        handlers: Dict[str, Handler] = {
            PAYMENT_SUCCEEDED: self._payment_succeeded,
            SUBSCRIPTION_CREATED: self._subscription_created,
            SUBSCRIPTION_UPDATED: self._subscription_updated,
            SUBSCRIPTION_DELETED: self._subscription_deleted,
        }
        for event_type in IDENTITY_EVENTS:
            handlers[event_type] = self._identity_outcome
        if event_types is not None:
            handlers = {key: value for key, value in handlers.items() if key in event_types}
        self.handlers = handlers

    def reconcile(self, payload: bytes, signature: Optional[str]) -> Result:
        if not self.secret:
            logger.error("Stripe webhook secret not configured.")
            return Failure.internal()

        verified = self._verify(payload, signature)
        if isinstance(verified, Failure):
            return verified

        event = self._parse(verified.value)
        if isinstance(event, Failure):
            return event
        event_id, event_type, data_object = event.value

        handler = self.handlers.get(event_type)
        if handler is None:
            logger.info("Ignoring Stripe event %s of type %s", event_id, event_type)
            return Ok(IGNORED)

        if ProcessedWebhookEvent.objects.filter(event_id=event_id).exists():
            logger.info("Stripe event %s already processed", event_id)
            return Ok(DUPLICATE)

        try:
            with transaction.atomic():
                change = handler(data_object)
                ProcessedWebhookEvent.objects.create(
                    event_id=event_id,
                    event_type=event_type,
                    outcome=ProcessedWebhookEvent.UNMATCHED if change.outcome == UNMATCHED else ProcessedWebhookEvent.APPLIED,
                    object_id=change.object_id[:255],
                    payload_sha256=hashlib.sha256(payload).hexdigest(),
                )
        except IntegrityError:
            if ProcessedWebhookEvent.objects.filter(event_id=event_id).exists():
                logger.info("Stripe event %s applied by a concurrent delivery", event_id)
                return Ok(DUPLICATE)
            logger.exception("Integrity error applying Stripe event %s", event_id)
            return Failure.internal()
        except DatabaseError:
            logger.exception("Database error applying Stripe event %s (%s)", event_id, event_type)
            return Failure.internal()
        except (AttributeError, KeyError, OverflowError, TypeError, ValueError):
            logger.exception("Stripe event %s (%s) has an unexpected shape", event_id, event_type)
            return Failure.invalid("Malformed payload")

        if change.notifications:
            fan_out(self.dispatcher, change.notifications)
        logger.info("Stripe event %s (%s) %s", event_id, event_type, change.outcome)
        return Ok(change.outcome)

    def _verify(self, payload: bytes, signature: Optional[str]) -> Result:
        if not signature:
            logger.warning("Stripe webhook received without a signature header.")
            return Failure(ErrorKind.SIGNATURE_INVALID, "Invalid signature")
        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Stripe webhook body is not valid UTF-8.")
            return Failure.invalid("Malformed payload")
        try:
            stripe.WebhookSignature.verify_header(text, signature, self.secret, self.tolerance)
        except stripe.SignatureVerificationError:
            logger.warning("Invalid Stripe signature.")
            return Failure(ErrorKind.SIGNATURE_INVALID, "Invalid signature")
        return Ok(text)

    @staticmethod
    def _parse(text: str) -> Result:
        try:
            event = json.loads(text)
        except ValueError:
            logger.warning("Invalid payload received on Stripe webhook.")
            return Failure.invalid("Malformed payload")
        if not isinstance(event, dict):
            return Failure.invalid("Malformed payload")
        event_id = event.get("id")
        event_type = event.get("type")
        data = event.get("data")
        data_object = data.get("object") if isinstance(data, dict) else None
        if not isinstance(event_id, str) or not event_id or not isinstance(event_type, str) or not isinstance(data_object, dict):
            logger.warning("Stripe webhook payload missing id, type or data.object.")
            return Failure.invalid("Malformed payload")
        return Ok((event_id, event_type, data_object))

    # Handlers run inside the transaction that writes the marker.

    def _payment_succeeded(self, intent: Mapping[str, Any]) -> AppliedChange:
        reference = str(intent.get("id") or "")
        booking = (
            Booking.objects.select_for_update().filter(payment_intent_id=reference).first()
            if reference
            else None
        )
        if booking is None:
            logger.warning("No booking matches payment intent %s", reference or "<missing>")
            return AppliedChange(UNMATCHED, reference)
        if not booking.is_awaiting_payment:
            logger.info("Booking %s already %s/%s", booking.pk, booking.status, booking.payment_status)
            return AppliedChange(APPLIED, reference)

        booking.mark_confirmed()
        return AppliedChange(APPLIED, reference, self._confirmation_notifications(booking))

    @staticmethod
    def _confirmation_notifications(booking: Booking) -> List[OutgoingNotification]:
        data = {"bookingId": booking.id, "itemId": booking.item_id, "itemType": booking.item_type}
        day = booking.date.isoformat()
        notifications = [
            OutgoingNotification(
                recipient_user_id=booking.user_id,
                type=Notification.BOOKING_CONFIRMED,
                title="Booking Confirmed",
                message=f"Your booking for {day} has been confirmed",
                data=data,
            )
        ]
        item = resolve_item(booking.item_type, booking.item_id)
        if item is None:
            logger.warning("Booking %s refers to a missing %s %s", booking.pk, booking.item_type, booking.item_id)
            return notifications
        notifications.append(
            OutgoingNotification(
                recipient_user_id=item.owner_id,
                type=Notification.NEW_CONFIRMED_BOOKING,
                title="New Confirmed Booking",
                message=f"{item.title} has a confirmed booking on {day}",
                data=dict(data),
            )
        )
        return notifications

    def _subscription_created(self, subscription: Mapping[str, Any]) -> AppliedChange:
        user = _subscription_user(subscription)
        if user is None:
            return _unmatched_subscription(subscription)
        activate_pro(
            user,
            subscription_id=str(subscription.get("id") or ""),
            status=str(subscription.get("status") or "active"),
            renews_at=_renewal_timestamp(subscription),
            customer_id=str(subscription.get("customer") or ""),
        )
        return AppliedChange(APPLIED, str(subscription.get("id") or ""))

    def _subscription_updated(self, subscription: Mapping[str, Any]) -> AppliedChange:
        user = _subscription_user(subscription)
        if user is None:
            return _unmatched_subscription(subscription)
        refresh_subscription(
            user,
            status=str(subscription.get("status") or user.subscription_status),
            renews_at=_renewal_timestamp(subscription),
            subscription_id=str(subscription.get("id") or ""),
        )
        return AppliedChange(APPLIED, str(subscription.get("id") or ""))

    def _subscription_deleted(self, subscription: Mapping[str, Any]) -> AppliedChange:
        user = _subscription_user(subscription)
        if user is None:
            return _unmatched_subscription(subscription)
        downgrade_to_free(user)
        return AppliedChange(APPLIED, str(subscription.get("id") or ""))

    def _identity_outcome(self, session: Mapping[str, Any]) -> AppliedChange:
        session_id = str(session.get("id") or "")
        user = _identity_user(session)
        if user is None:
            logger.warning("No user matches identity session %s", session_id or "<missing>")
            return AppliedChange(UNMATCHED, session_id)
        outcome = str(session.get("status") or "")
        if not apply_verification_outcome(user, outcome, session_id=session_id):
            logger.info("Identity session %s reported unhandled status %r", session_id, outcome)
        return AppliedChange(APPLIED, session_id)


def _metadata_user_id(obj: Mapping[str, Any]) -> Optional[str]:
    metadata = obj.get("metadata")
    if not isinstance(metadata, dict):
        return None
    value = metadata.get("userId") or metadata.get("user_id")
    return str(value) if value else None


def _subscription_user(subscription: Mapping[str, Any]) -> Optional[User]:
    user_id = _metadata_user_id(subscription)
    if user_id and user_id.isdigit():
        user = User.objects.select_for_update().filter(pk=int(user_id)).first()
        if user is not None:
            return user
    customer = subscription.get("customer")
    if customer:
        return User.objects.select_for_update().filter(stripe_customer_id=str(customer)).first()
    return None


def _unmatched_subscription(subscription: Mapping[str, Any]) -> AppliedChange:
    subscription_id = str(subscription.get("id") or "")
    logger.warning("No user matches subscription %s", subscription_id or "<missing>")
    return AppliedChange(UNMATCHED, subscription_id)


def _identity_user(session: Mapping[str, Any]) -> Optional[User]:
    user_id = _metadata_user_id(session)
    if user_id and user_id.isdigit():
        user = User.objects.select_for_update().filter(pk=int(user_id)).first()
        if user is not None:
            return user
    session_id = session.get("id")
    if session_id:
        return User.objects.select_for_update().filter(identity_session_id=str(session_id)).first()
    return None


def _renewal_timestamp(subscription: Mapping[str, Any]) -> Optional[datetime]:
    period_end = subscription.get("current_period_end")
    if period_end is None:
        items = subscription.get("items")
        rows = items.get("data") if isinstance(items, dict) else None
        if isinstance(rows, list) and rows and isinstance(rows[0], dict):
            period_end = rows[0].get("current_period_end")
    if period_end is None:
        return None
    try:
        return datetime.fromtimestamp(int(period_end), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None
