from decimal import Decimal

import pytest

from commissions.calculator import compute_commission, format_commission, is_valid_commission


def test_worked_example():
    split = compute_commission(Decimal("1000"))

    assert split.total_commission == Decimal("30.00")
    assert split.platform_fee == Decimal("1.50")
    assert split.agent_commission == Decimal("28.50")
    assert split.as_dict() == {
        "totalCommission": "30.00",
        "platformFee": "1.50",
        "agentCommission": "28.50",
    }


def test_each_value_is_rounded_independently():
    # total 3.7035, fee 0.185175, agent 3.518325
    split = compute_commission(Decimal("123.45"))

    assert split.total_commission == Decimal("3.70")
    assert split.platform_fee == Decimal("0.19")
    assert split.agent_commission == Decimal("3.52")
    assert split.total_commission - split.platform_fee != split.agent_commission


@pytest.mark.parametrize("amount", ["1", "33.33", "999.99", "1234567.89", "0.17"])
def test_scale_linear_within_one_cent(amount):
    single = compute_commission(Decimal(amount))
    double = compute_commission(Decimal(amount) * 2)

    assert abs(double.total_commission - 2 * single.total_commission) <= Decimal("0.01")


def test_rates_can_be_overridden(settings):
    settings.COMMISSION_RATE = Decimal("0.05")
    settings.PLATFORM_FEE_RATE = Decimal("0.10")

    split = compute_commission(Decimal("200"))

    assert (split.total_commission, split.platform_fee, split.agent_commission) == (
        Decimal("10.00"),
        Decimal("1.00"),
        Decimal("9.00"),
    )


@pytest.mark.parametrize(
    "amount, sale, valid",
    [
        ("30", "1000", True),
        ("100", "1000", True),
        ("100.01", "1000", False),
        ("0", "1000", False),
        ("-5", "1000", False),
    ],
)
def test_is_valid_commission(amount, sale, valid):
    assert is_valid_commission(Decimal(amount), Decimal(sale)) is valid


def test_format_commission():
    assert format_commission(Decimal("1234.5")) == "£1,234.50"
    assert format_commission(Decimal("28.5"), "usd") == "$28.50"
    assert format_commission(Decimal("-3"), "EUR") == "-€3.00"
    assert format_commission(Decimal("1500"), "JPY") == "JPY 1,500"
