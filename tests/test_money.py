from decimal import Decimal

import pytest

from quote_pricing.engine import Constraint, MoneyAmount, ValidationError
from quote_pricing.engine.money import (
    format_money,
    format_rate,
    minor_unit,
    percentage_of,
    round_currency,
    sum_money,
    tax_exclusive_price,
    to_decimal,
)


def test_to_decimal_accepts_exact_inputs():
    assert to_decimal(5) == Decimal("5")
    assert to_decimal("150.00") == Decimal("150.00")
    assert to_decimal(Decimal("0.1")) == Decimal("0.1")


@pytest.mark.parametrize("value", [0.1, True, "abc", "NaN", "Infinity", None, Decimal("NaN"), Decimal("-Infinity")])
def test_to_decimal_rejects_inexact_or_invalid(value):
    with pytest.raises(ValidationError) as exc:
        to_decimal(value, "lineItems[0].quantity")
    assert exc.value.constraint is Constraint.DECIMAL_REQUIRED
    assert exc.value.field_path == "lineItems[0].quantity"


def test_minor_unit():
    assert minor_unit(2) == Decimal("0.01")
    assert minor_unit(0) == Decimal("1")
    assert minor_unit(3) == Decimal("0.001")


def test_round_currency_is_half_up():
    assert round_currency(Decimal("2.675")) == Decimal("2.68")
    assert round_currency(Decimal("2.665")) == Decimal("2.67")
    assert round_currency(Decimal("0.0149")) == Decimal("0.01")
    assert round_currency(Decimal("99.5"), 0) == Decimal("100")


def test_percentage_of_rounds_to_minor_unit():
    assert percentage_of(Decimal("0.10"), Decimal("15")) == Decimal("0.02")
    assert percentage_of(Decimal("0.01"), Decimal("15")) == Decimal("0.00")
    assert percentage_of(Decimal("999"), Decimal("10"), 0) == Decimal("100")


def test_tax_exclusive_price():
    assert tax_exclusive_price(Decimal("115"), Decimal("15"), True) == Decimal("100")
    assert tax_exclusive_price(Decimal("172.50"), Decimal("15"), True) == Decimal("150")
    assert tax_exclusive_price(Decimal("115"), Decimal("15"), False) == Decimal("115")
    assert tax_exclusive_price(Decimal("115"), Decimal("0"), True) == Decimal("115")


def test_sum_money():
    total = sum_money([MoneyAmount(Decimal("1.10"), "NZD"), MoneyAmount(Decimal("2.20"), "NZD")], "NZD")
    assert total == MoneyAmount(Decimal("3.30"), "NZD")
    assert sum_money([], "NZD").amount == Decimal("0")


def test_sum_money_rejects_mixed_currencies():
    with pytest.raises(ValueError, match="different currencies"):
        sum_money([MoneyAmount(Decimal("1"), "NZD"), MoneyAmount(Decimal("1"), "AUD")], "NZD")


def test_format_money():
    assert format_money(MoneyAmount(Decimal("6000"), "NZD")) == "NZD 6000.00"
    assert format_money(MoneyAmount(Decimal("1500"), "JPY"), 0) == "JPY 1500"
    assert format_money(MoneyAmount(Decimal("1.2345"), "KWD"), 3) == "KWD 1.235"


@pytest.mark.parametrize("rate,expected", [
    (Decimal("15"), "15"),
    (Decimal("15.00"), "15"),
    (Decimal("12.5"), "12.5"),
    (Decimal("0"), "0"),
    (Decimal("100"), "100"),
])
def test_format_rate(rate, expected):
    assert format_rate(rate) == expected
