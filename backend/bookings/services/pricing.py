from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from django.conf import settings

from core.money import quantize_money
from listings.models import PROPERTY, BookableItem

CLEANING_FEE = "Cleaning Fee"
SERVICE_FEE = "Service Fee"


@dataclass(frozen=True)
class Fee:
    name: str
    amount: Decimal


@dataclass(frozen=True)
class PricingBlock:
    base_price: Decimal
    currency: str
    additional_fees: Tuple[Fee, ...]

    @property
    def total(self) -> Decimal:
        return quantize_money(
            self.base_price + sum((fee.amount for fee in self.additional_fees), Decimal("0")),
            self.currency,
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "basePrice": str(self.base_price),
            "currency": self.currency,
            "additionalFees": [
                {"name": fee.name, "amount": str(fee.amount)} for fee in self.additional_fees
            ],
        }


def service_fee(base_price: Decimal, currency: str, rate: Optional[Decimal] = None) -> Decimal:
    """Platform service fee, rounded half-up to the currency's minor unit."""
    if rate is None:
        rate = settings.SERVICE_FEE_RATE
    return quantize_money(Decimal(base_price) * rate, currency)


def build_pricing(item: BookableItem) -> PricingBlock:
    """
    Base price plus fees in a fixed order: cleaning fee (properties that set one),
    then the service fee, which always applies.
    """
    currency = item.currency
    base_price = quantize_money(item.price, currency)
    fees = []
    cleaning_fee = item.cleaning_fee_amount
    if item.item_type == PROPERTY and cleaning_fee:
        fees.append(Fee(CLEANING_FEE, quantize_money(cleaning_fee, currency)))
    fees.append(Fee(SERVICE_FEE, service_fee(base_price, currency)))
    return PricingBlock(base_price=base_price, currency=currency, additional_fees=tuple(fees))
