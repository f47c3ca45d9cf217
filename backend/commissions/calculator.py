"""
Fee split for a property sale.

The agent earns COMMISSION_RATE of the sale and the platform keeps
PLATFORM_FEE_RATE of that commission. Each figure is derived from the
unrounded value before it and then rounded half-up to 2 places on its own, so
agent_commission can differ from total_commission - platform_fee by one cent.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.conf import settings

from core.money import quantize_money, round_cents

CURRENCY_SYMBOLS = {"GBP": "£", "USD": "$", "EUR": "€"}


@dataclass(frozen=True)
class CommissionSplit:
    total_commission: Decimal
    platform_fee: Decimal
    agent_commission: Decimal

    def as_dict(self):
        return {
            "totalCommission": str(self.total_commission),
            "platformFee": str(self.platform_fee),
            "agentCommission": str(self.agent_commission),
        }


def compute_commission(
    sale_amount: Decimal,
    *,
    commission_rate: Optional[Decimal] = None,
    platform_fee_rate: Optional[Decimal] = None,
) -> CommissionSplit:
    commission_rate = settings.COMMISSION_RATE if commission_rate is None else commission_rate
    platform_fee_rate = settings.PLATFORM_FEE_RATE if platform_fee_rate is None else platform_fee_rate

    total = Decimal(sale_amount) * commission_rate
    platform_fee = total * platform_fee_rate
    agent = total - platform_fee
    return CommissionSplit(
        total_commission=round_cents(total),
        platform_fee=round_cents(platform_fee),
        agent_commission=round_cents(agent),
    )


def is_valid_commission(amount: Decimal, sale_amount: Decimal, *, max_rate: Optional[Decimal] = None) -> bool:
    """A commission must be positive and no more than MAX_COMMISSION_RATE of the sale."""
    max_rate = settings.MAX_COMMISSION_RATE if max_rate is None else max_rate
    if amount <= 0:
        return False
    return amount <= Decimal(sale_amount) * max_rate


def format_commission(amount: Decimal, currency: str = "GBP") -> str:
    code = (currency or "GBP").upper()
    value = quantize_money(Decimal(amount), code)
    sign = "-" if value < 0 else ""
    digits = f"{abs(value):,}"
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol is None:
        return f"{sign}{code} {digits}"
    return f"{sign}{symbol}{digits}"
