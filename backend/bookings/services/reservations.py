from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Mapping, Optional

from django.db import DatabaseError, transaction

from bookings.models import Booking, ReservationLock
from core.results import Failure, Ok, Result
from listings.models import ITEM_TYPES, BookableItem, resolve_item
from notifications.dispatch import (
    NotificationDispatcher,
    OutgoingNotification,
    fan_out,
    get_dispatcher,
)
from notifications.models import Notification

from .availability import parse_day, parse_item_id
from .payments import PaymentGatewayError, cancel_payment_intent, create_payment_intent
from .pricing import build_pricing

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReservationRequest:
    item_type: str
    item_id: int
    date: date
    guests: int
    special_requests: str = ""


@dataclass(frozen=True)
class Reservation:
    booking: Booking
    client_secret: str

    def as_dict(self):
        booking = self.booking
        return {
            "id": booking.id,
            "status": booking.status,
            "paymentRequired": True,
            "paymentAmount": str(booking.total_amount),
            "paymentCurrency": booking.currency,
            "clientSecret": self.client_secret,
            "bookingReference": str(booking.id),
        }


def parse_reservation_request(data: Mapping[str, Any]) -> Result:
    missing = [
        field
        for field in ("itemId", "itemType", "date", "guests")
        if data.get(field) in (None, "")
    ]
    if missing:
        return Failure.invalid(
            "Missing required fields",
            {field: "This field is required." for field in missing},
        )
    if data["itemType"] not in ITEM_TYPES:
        return Failure.invalid("Invalid item type", {"itemType": f"Must be one of {', '.join(ITEM_TYPES)}."})
    item_id = parse_item_id(data["itemId"])
    if item_id is None:
        return Failure.invalid("Invalid item id", {"itemId": "Must be a positive integer."})
    day = parse_day(data["date"])
    if day is None:
        return Failure.invalid("Invalid date", {"date": "Enter a valid ISO date."})
    guests = parse_item_id(data["guests"])
    if guests is None:
        return Failure.invalid("Invalid guest count", {"guests": "Number of guests must be at least 1."})
    return Ok(
        ReservationRequest(
            item_type=data["itemType"],
            item_id=item_id,
            date=day,
            guests=guests,
            special_requests=str(data.get("specialRequests") or ""),
        )
    )


def _lock_day(item_type: str, item_id: int, day: date) -> ReservationLock:
    lock, _ = ReservationLock.objects.get_or_create(item_type=item_type, item_id=item_id, date=day)
    return ReservationLock.objects.select_for_update().get(pk=lock.pk)


def _capacity_conflict(item: BookableItem, current: int, request: ReservationRequest) -> Failure:
    return Failure.conflict(
        "Not enough capacity for requested guests",
        {
            "maxGuests": item.max_guests,
            "currentBookings": current,
            "requested": request.guests,
        },
    )


class ReservationService:
    """
    Accepts reservation attempts for a single day of a bookable item.

    The capacity check and the insert run in one transaction holding the
    ReservationLock row for (item_type, item_id, date), so two attempts racing
    for the last places are serialized and the later one sees the earlier
    booking when it re-aggregates. The payment intent is created before the
    lock is taken and cancelled when the locked re-check refuses the attempt.
    """

    def __init__(
        self,
        *,
        dispatcher: Optional[NotificationDispatcher] = None,
        create_intent: Callable[..., Any] = create_payment_intent,
        cancel_intent: Callable[[str], None] = cancel_payment_intent,
    ):
        self.dispatcher = dispatcher or get_dispatcher()
        self.create_intent = create_intent
        self.cancel_intent = cancel_intent

    def reserve(self, user, request: ReservationRequest) -> Result:
        item = resolve_item(request.item_type, request.item_id)
        if item is None:
            return Failure.not_found("Item not found")
        if request.guests > item.max_guests:
            return Failure.conflict(
                "Not enough capacity for requested guests",
                {"maxGuests": item.max_guests, "requested": request.guests},
            )

        pricing = build_pricing(item)
        try:
            current = Booking.objects.guests_on(request.item_type, item.pk, request.date)
            if current + request.guests > item.max_guests:
                return _capacity_conflict(item, current, request)
            # Created before the day lock so the gateway call never holds it.
            intent = self.create_intent(
                amount=pricing.total,
                currency=item.currency,
                metadata={
                    "itemId": str(item.pk),
                    "itemType": request.item_type,
                    "date": request.date.isoformat(),
                    "guests": str(request.guests),
                    "userId": str(user.pk),
                },
            )
        except PaymentGatewayError:
            logger.exception("Payment intent creation failed for %s:%s", request.item_type, item.pk)
            return Failure.internal()
        except DatabaseError:
            logger.exception("Reservation failed for %s:%s on %s", request.item_type, item.pk, request.date)
            return Failure.internal()

        booking = None
        try:
            with transaction.atomic():
                _lock_day(request.item_type, item.pk, request.date)
                current = Booking.objects.guests_on(request.item_type, item.pk, request.date)
                if current + request.guests <= item.max_guests:
                    booking = Booking.objects.create(
                        user=user,
                        item_type=request.item_type,
                        item_id=item.pk,
                        date=request.date,
                        guests=request.guests,
                        status=Booking.PENDING,
                        payment_status=Booking.UNPAID,
                        payment_intent_id=intent.id,
                        total_amount=pricing.total,
                        currency=item.currency,
                        special_requests=request.special_requests,
                    )
        except DatabaseError:
            logger.exception("Reservation failed for %s:%s on %s", request.item_type, item.pk, request.date)
            self._release_intent(intent)
            return Failure.internal()

        if booking is None:
            self._release_intent(intent)
            return _capacity_conflict(item, current, request)

        logger.info("Booking %s created for %s:%s on %s", booking.pk, booking.item_type, booking.item_id, booking.date)
        fan_out(self.dispatcher, [self._owner_notification(item, booking)])
        return Ok(Reservation(booking=booking, client_secret=getattr(intent, "client_secret", "") or ""))

    def _release_intent(self, intent) -> None:
        try:
            self.cancel_intent(intent.id)
        except PaymentGatewayError:
            logger.exception("Could not cancel payment intent %s", intent.id)

    def cancel(self, user, booking_id) -> Result:
        try:
            with transaction.atomic():
                booking = (
                    Booking.objects.select_for_update()
                    .filter(pk=booking_id, user=user)
                    .first()
                )
                if booking is None:
                    return Failure.not_found("Booking not found")
                if booking.status == Booking.CANCELLED:
                    return Ok(booking)
                if booking.payment_status == Booking.PAID or booking.status == Booking.CONFIRMED:
                    return Failure.conflict("Confirmed bookings cannot be cancelled here")
                booking.mark_cancelled()
        except DatabaseError:
            logger.exception("Cancelling booking %s failed", booking_id)
            return Failure.internal()
        logger.info("Booking %s cancelled by user %s", booking.pk, user.pk)
        return Ok(booking)

    @staticmethod
    def _owner_notification(item: BookableItem, booking: Booking) -> OutgoingNotification:
        return OutgoingNotification(
            recipient_user_id=item.owner_id,
            type=Notification.NEW_BOOKING,
            title="New Booking Request",
            message=f"New booking request for {item.title} on {booking.date.isoformat()}",
            data={
                "bookingId": booking.id,
                "itemId": booking.item_id,
                "itemType": booking.item_type,
            },
        )
