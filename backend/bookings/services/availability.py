"""
Per-day availability projection for a bookable item.

The projection itself is pure: it takes the item's capacity and price plus the
guests already holding each day and yields one slot per calendar day. Reading
the ledger happens once in `check_availability`; nothing is locked, so the
answer is advisory and may change right after it is returned.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Iterator, Mapping, Optional

from django.db.models import Sum

from bookings.models import Booking
from core.money import quantize_money
from core.results import Failure, Ok, Result
from listings.models import ITEM_TYPES, resolve_item

from .pricing import PricingBlock, build_pricing

MAX_RANGE_DAYS = 366


@dataclass(frozen=True)
class DaySlot:
    date: date
    available: bool
    fits: bool
    max_guests: int
    current_bookings: int
    price: Decimal
    currency: str

    def as_dict(self) -> Dict[str, Any]:
        day = self.date.isoformat()
        return {
            "id": day,
            "date": day,
            "available": self.available,
            "fits": self.fits,
            "maxGuests": self.max_guests,
            "currentBookings": self.current_bookings,
            "price": str(self.price),
            "currency": self.currency,
        }


class AvailabilityProjection:
    """Lazy, finite and restartable: each iteration walks [start, end] again."""

    def __init__(
        self,
        *,
        start: date,
        end: date,
        max_guests: int,
        price: Decimal,
        currency: str,
        booked_guests: Mapping[date, int],
        requested_guests: Optional[int] = None,
    ):
        self.start = start
        self.end = end
        self.max_guests = max_guests
        self.price = quantize_money(price, currency)
        self.currency = currency
        self.booked_guests = booked_guests
        self.requested_guests = requested_guests

    def __iter__(self) -> Iterator[DaySlot]:
        day = self.start
        while day <= self.end:
            current = self.booked_guests.get(day, 0)
            available = current < self.max_guests
            if self.requested_guests is None:
                fits = available
            else:
                fits = current + self.requested_guests <= self.max_guests
            yield DaySlot(
                date=day,
                available=available,
                fits=fits,
                max_guests=self.max_guests,
                current_bookings=current,
                price=self.price,
                currency=self.currency,
            )
            day += timedelta(days=1)

    def __len__(self) -> int:
        return (self.end - self.start).days + 1

    @property
    def any_available(self) -> bool:
        return any(slot.available for slot in self)


@dataclass(frozen=True)
class AvailabilityQuery:
    item_type: str
    item_id: int
    start: date
    end: date
    guests: Optional[int] = None


@dataclass(frozen=True)
class AvailabilityResult:
    projection: AvailabilityProjection
    pricing: PricingBlock

    def as_dict(self) -> Dict[str, Any]:
        slots = [slot.as_dict() for slot in self.projection]
        return {
            "available": any(slot["available"] for slot in slots),
            "slots": slots,
            "pricing": self.pricing.as_dict(),
        }


def parse_day(value) -> Optional[date]:
    """Accept an ISO date or an ISO datetime (taken as its UTC calendar day)."""
    if isinstance(value, datetime):
        return value.astimezone(timezone.utc).date() if value.tzinfo else value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


def parse_item_id(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        item_id = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return item_id if item_id > 0 else None


def parse_availability_query(data: Mapping[str, Any]) -> Result:
    """Validate the raw request; never touches the database."""
    missing = [
        field
        for field in ("itemId", "itemType", "startDate", "endDate")
        if data.get(field) in (None, "")
    ]
    if missing:
        return Failure.invalid(
            "Missing required fields",
            {field: "This field is required." for field in missing},
        )

    item_type = data["itemType"]
    if item_type not in ITEM_TYPES:
        return Failure.invalid("Invalid item type", {"itemType": f"Must be one of {', '.join(ITEM_TYPES)}."})

    item_id = parse_item_id(data["itemId"])
    if item_id is None:
        return Failure.invalid("Invalid item id", {"itemId": "Must be a positive integer."})

    start = parse_day(data["startDate"])
    end = parse_day(data["endDate"])
    errors = {}
    if start is None:
        errors["startDate"] = "Enter a valid ISO date."
    if end is None:
        errors["endDate"] = "Enter a valid ISO date."
    if errors:
        return Failure.invalid("Invalid date", errors)
    if start > end:
        return Failure.invalid("Start date must not be after end date", {"endDate": "Must be on or after startDate."})
    if (end - start).days + 1 > MAX_RANGE_DAYS:
        return Failure.invalid("Date range too long", {"endDate": f"Range is limited to {MAX_RANGE_DAYS} days."})

    guests = data.get("guests")
    if guests not in (None, ""):
        guests = parse_item_id(guests)
        if guests is None:
            return Failure.invalid("Invalid guest count", {"guests": "Must be a positive integer."})
    else:
        guests = None

    return Ok(AvailabilityQuery(item_type=item_type, item_id=item_id, start=start, end=end, guests=guests))


def booked_guests_by_day(item_type: str, item_id: int, start: date, end: date) -> Dict[date, int]:
    rows = (
        Booking.objects.for_item(item_type, item_id)
        .holding_capacity()
        .filter(date__range=(start, end))
        .order_by()
        .values("date")
        .annotate(total=Sum("guests"))
        .values_list("date", "total")
    )
    return {day: total or 0 for day, total in rows}


def check_availability(query: AvailabilityQuery) -> Result:
    item = resolve_item(query.item_type, query.item_id)
    if item is None:
        return Failure.not_found("Item not found")

    projection = AvailabilityProjection(
        start=query.start,
        end=query.end,
        max_guests=item.max_guests,
        price=item.price,
        currency=item.currency,
        booked_guests=booked_guests_by_day(query.item_type, item.pk, query.start, query.end),
        requested_guests=query.guests,
    )
    return Ok(AvailabilityResult(projection=projection, pricing=build_pricing(item)))
