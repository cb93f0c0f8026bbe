"""
Money helpers for exact decimal arithmetic.

All monetary math goes through decimal.Decimal. Intermediate operations run
in MONEY_CONTEXT; currency rounding is always an explicit half-up quantize.
"""
from decimal import Context, Decimal, ROUND_HALF_EVEN, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Union

from .errors import Constraint, ValidationError
from .models import MoneyAmount

MONEY_CONTEXT = Context(prec=34, rounding=ROUND_HALF_EVEN)
HUNDRED = Decimal("100")
ZERO = Decimal("0")

# Upper bound for quantities, amounts and line amounts
MAX_AMOUNT = Decimal("1E+18")

DecimalLike = Union[Decimal, int, str]


def to_decimal(value: DecimalLike, field_path: str = "value") -> Decimal:
    """
    Coerce an int, str or Decimal to Decimal.

    Floats are refused: they cannot represent most cent values exactly.
    NaN and infinities are refused whatever their type.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or isinstance(value, float):
        raise ValidationError(
            field_path,
            f"expected an exact decimal value, got {type(value).__name__}",
            Constraint.DECIMAL_REQUIRED,
        )
    else:
        try:
            result = Decimal(value)
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(
                field_path,
                f"{value!r} is not a decimal number",
                Constraint.DECIMAL_REQUIRED,
            ) from None
    if not result.is_finite():
        raise ValidationError(field_path, f"{value!r} is not finite", Constraint.DECIMAL_REQUIRED)
    return result


def minor_unit(decimals: int) -> Decimal:
    """Smallest currency unit for a number of decimals (2 -> 0.01, 0 -> 1)."""
    return Decimal(1).scaleb(-decimals)


def round_currency(amount: Decimal, decimals: int = 2) -> Decimal:
    """Round half-up to the currency's minor unit."""
    return amount.quantize(minor_unit(decimals), rounding=ROUND_HALF_UP)


def percentage_of(amount: Decimal, percentage: Decimal, decimals: int = 2) -> Decimal:
    return round_currency(amount * percentage / HUNDRED, decimals)


def tax_exclusive_price(unit_price: Decimal, tax_rate: Decimal, tax_inclusive: bool) -> Decimal:
    """Strip embedded tax from a tax-inclusive unit price; unrounded."""
    if not tax_inclusive or tax_rate == ZERO:
        return unit_price
    return unit_price / (1 + tax_rate / HUNDRED)


def line_subtotal(quantity: Decimal, exclusive_price: Decimal, decimals: int = 2) -> Decimal:
    return round_currency(quantity * exclusive_price, decimals)


def money(amount: DecimalLike, currency: str, decimals: int = 2) -> MoneyAmount:
    return MoneyAmount(round_currency(to_decimal(amount), decimals), currency)


def zero_money(currency: str, decimals: int = 2) -> MoneyAmount:
    return MoneyAmount(round_currency(ZERO, decimals), currency)


def sum_money(amounts: Iterable[MoneyAmount], currency: str, decimals: int = 2) -> MoneyAmount:
    """Sum amounts of one currency; an empty iterable sums to zero."""
    total = ZERO
    for item in amounts:
        if item.currency != currency:
            raise ValueError(f"Cannot sum amounts with different currencies: {currency} and {item.currency}")
        total += item.amount
    return MoneyAmount(round_currency(total, decimals), currency)


def format_decimal(amount: Decimal, decimals: int = 2) -> str:
    return f"{round_currency(amount, decimals):f}"


def format_money(value: MoneyAmount, decimals: int = 2) -> str:
    """Format as ``NZD 6000.00``."""
    return f"{value.currency} {format_decimal(value.amount, decimals)}"


def format_rate(rate: Decimal) -> str:
    """Render a percentage without trailing zeros (15, 12.5)."""
    normalized = rate.normalize()
    if normalized == normalized.to_integral_value():
        return f"{normalized.quantize(Decimal(1)):f}"
    return f"{normalized:f}"
