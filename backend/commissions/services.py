from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Count, Sum

from accounts.models import User
from bookings.services.availability import parse_item_id
from core.money import parse_decimal, round_cents
from core.results import Failure, Ok, Result
from listings.models import Property
from notifications.dispatch import (
    NotificationDispatcher,
    OutgoingNotification,
    fan_out,
    get_dispatcher,
)
from notifications.models import Notification

from .calculator import compute_commission, format_commission, is_valid_commission
from .models import Commission

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommissionRequest:
    property_id: int
    agent_id: int
    sale_amount: Decimal
    idempotency_key: Optional[str] = None


@dataclass(frozen=True)
class CreatedCommission:
    commission: Commission
    created: bool


def parse_commission_request(data: Mapping[str, Any], idempotency_key: Optional[str] = None) -> Result:
    missing = [field for field in ("propertyId", "agentId", "saleAmount") if data.get(field) in (None, "")]
    if missing:
        return Failure.invalid(
            "Missing required fields",
            {field: "This field is required." for field in missing},
        )
    property_id = parse_item_id(data["propertyId"])
    if property_id is None:
        return Failure.invalid("Invalid property id", {"propertyId": "Must be a positive integer."})
    agent_id = parse_item_id(data["agentId"])
    if agent_id is None:
        return Failure.invalid("Invalid agent id", {"agentId": "Must be a positive integer."})
    sale_amount = parse_decimal(data["saleAmount"])
    if sale_amount is None or sale_amount <= 0:
        return Failure.invalid("Invalid sale amount", {"saleAmount": "Must be a positive amount."})
    key = (idempotency_key or "").strip() or None
    if key is not None and len(key) > 255:
        return Failure.invalid("Invalid idempotency key", {"Idempotency-Key": "Must be at most 255 characters."})
    return Ok(CommissionRequest(property_id=property_id, agent_id=agent_id, sale_amount=round_cents(sale_amount), idempotency_key=key))


def _replayed(existing: Commission, request: CommissionRequest) -> Result:
    """An earlier commission stored under the same key, if it records the same sale."""
    stored = (existing.property_id, existing.agent_id, existing.sale_amount)
    if stored != (request.property_id, request.agent_id, request.sale_amount):
        return Failure.conflict(
            "Idempotency key was already used for a different commission",
            {"Idempotency-Key": request.idempotency_key},
        )
    return Ok(CreatedCommission(existing, created=False))


class CommissionService:
    def __init__(self, *, dispatcher: Optional[NotificationDispatcher] = None):
        self.dispatcher = dispatcher or get_dispatcher()

    def create(self, request: CommissionRequest, *, created_by=None) -> Result:
        if request.idempotency_key:
            existing = Commission.objects.filter(idempotency_key=request.idempotency_key).first()
            if existing is not None:
                return _replayed(existing, request)

        prop = Property.objects.filter(pk=request.property_id).first()
        if prop is None:
            return Failure.not_found("Property not found")
        agent = User.objects.filter(pk=request.agent_id, role=User.ROLE_AGENT).first()
        if agent is None:
            return Failure.not_found("Agent not found")
        if not agent.is_verified:
            return Failure.forbidden("Agent is not verified")

        split = compute_commission(request.sale_amount)
        if not is_valid_commission(split.total_commission, request.sale_amount):
            return Failure.invalid("Commission out of range", {"saleAmount": "Sale amount is too small for a commission."})

        try:
            with transaction.atomic():
                commission = Commission.objects.create(
                    property=prop,
                    agent=agent,
                    created_by=created_by,
                    sale_amount=request.sale_amount,
                    total_commission=split.total_commission,
                    platform_fee=split.platform_fee,
                    agent_commission=split.agent_commission,
                    currency=prop.currency,
                    status=Commission.PENDING,
                    idempotency_key=request.idempotency_key,
                )
        except IntegrityError:
            existing = Commission.objects.filter(idempotency_key=request.idempotency_key).first() if request.idempotency_key else None
            if existing is not None:
                return _replayed(existing, request)
            logger.exception("Integrity error creating commission for property %s", prop.pk)
            return Failure.internal()
        except DatabaseError:
            logger.exception("Creating commission for property %s failed", prop.pk)
            return Failure.internal()

        logger.info("Commission %s created for agent %s on property %s", commission.pk, agent.pk, prop.pk)
        fan_out(
            self.dispatcher,
            [
                OutgoingNotification(
                    recipient_user_id=agent.pk,
                    type=Notification.COMMISSION,
                    title="New Commission Created",
                    message=(
                        f"Commission of {format_commission(commission.agent_commission, commission.currency)} "
                        f"created for property {prop.address or prop.title}"
                    ),
                    data={"commissionId": commission.pk, "propertyId": prop.pk},
                )
            ],
        )
        return Ok(CreatedCommission(commission, created=True))


def agent_summary(agent) -> dict:
    """Counts per status plus paid and pending agent totals."""
    rows = (
        Commission.objects.for_agent(agent)
        .order_by()
        .values("status")
        .annotate(count=Count("id"), agent_total=Sum("agent_commission"), platform_total=Sum("platform_fee"))
    )
    by_status = {row["status"]: row for row in rows}

    def _total(status, key):
        value = by_status.get(status, {}).get(key)
        return str(value if value is not None else Decimal("0.00"))

    return {
        "pending": by_status.get(Commission.PENDING, {}).get("count", 0),
        "paid": by_status.get(Commission.PAID, {}).get("count", 0),
        "cancelled": by_status.get(Commission.CANCELLED, {}).get("count", 0),
        "totalEarned": _total(Commission.PAID, "agent_total"),
        "totalPending": _total(Commission.PENDING, "agent_total"),
        "totalPlatformFees": _total(Commission.PAID, "platform_total"),
    }
