"""
Input validation for quote calculations.

Checks run before any line is priced and raise ValidationError on the first
violation. Field paths use the wire names of the JSON request
(``lineItems[2].fixedDiscount``) with zero-based indexes.
"""
from decimal import Decimal
from typing import Callable, Optional

from .errors import Constraint, ValidationError
from .models import DiscountKind, LineItemInput, MoneyAmount, QuoteDiscount, QuoteInput
from .money import HUNDRED, MAX_AMOUNT, ZERO, line_subtotal, percentage_of, round_currency, tax_exclusive_price, to_decimal


def _require_text(value: Optional[str], path: str):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(path, "must be a non-empty string", Constraint.NON_EMPTY_REQUIRED)


def _require_percentage(value, path: str) -> Decimal:
    pct = to_decimal(value, path)
    if pct < ZERO or pct > HUNDRED:
        raise ValidationError(path, f"must be between 0 and 100, got {pct}", Constraint.PERCENTAGE_RANGE)
    return pct


def _require_bounded(value: Decimal, path: str):
    if value > MAX_AMOUNT:
        raise ValidationError(path, f"must not exceed {MAX_AMOUNT:f}, got {value}", Constraint.AMOUNT_OUT_OF_RANGE)


def _require_money(value: MoneyAmount, currency: str, path: str) -> Decimal:
    if value.currency != currency:
        raise ValidationError(
            f"{path}.currency",
            f"currency {value.currency} does not match quote currency {currency}",
            Constraint.CURRENCY_MISMATCH,
        )
    amount = to_decimal(value.amount, f"{path}.amount")
    if amount < ZERO:
        raise ValidationError(f"{path}.amount", f"must not be negative, got {amount}", Constraint.NON_NEGATIVE_REQUIRED)
    _require_bounded(amount, f"{path}.amount")
    return amount


def validate_line_item(item: LineItemInput, index: int, currency: str, decimals: int = 2):
    """Validate one line, including discount bounds against its pre-discount amount."""
    path = f"lineItems[{index}]"

    _require_text(item.description, f"{path}.description")
    _require_text(item.unit, f"{path}.unit")

    quantity = to_decimal(item.quantity, f"{path}.quantity")
    if quantity <= ZERO:
        raise ValidationError(f"{path}.quantity", f"must be greater than 0, got {quantity}", Constraint.POSITIVE_REQUIRED)
    _require_bounded(quantity, f"{path}.quantity")

    unit_price = _require_money(item.unit_price, currency, f"{path}.unitPrice")

    tax_rate = to_decimal(item.tax_rate, f"{path}.taxRate")
    if tax_rate < ZERO:
        raise ValidationError(f"{path}.taxRate", f"must not be negative, got {tax_rate}", Constraint.NON_NEGATIVE_REQUIRED)
    if tax_rate > HUNDRED:
        raise ValidationError(f"{path}.taxRate", f"must not exceed 100, got {tax_rate}", Constraint.PERCENTAGE_RANGE)

    exclusive_price = tax_exclusive_price(unit_price, tax_rate, item.tax_inclusive)
    if quantity * exclusive_price > MAX_AMOUNT:
        raise ValidationError(
            f"{path}.quantity",
            f"line amount {quantity} x {exclusive_price} exceeds {MAX_AMOUNT:f}",
            Constraint.AMOUNT_OUT_OF_RANGE,
        )

    pct = ZERO
    if item.percentage_discount is not None:
        pct = _require_percentage(item.percentage_discount, f"{path}.percentageDiscount")

    if item.fixed_discount is None:
        return

    fixed = _require_money(item.fixed_discount, currency, f"{path}.fixedDiscount")
    base = line_subtotal(quantity, exclusive_price, decimals)
    fixed = round_currency(fixed, decimals)
    if fixed > base:
        raise ValidationError(
            f"{path}.fixedDiscount",
            f"fixed discount {fixed} exceeds the line amount {base}",
            Constraint.DISCOUNT_EXCEEDS_BASE,
        )
    if percentage_of(base, pct, decimals) + fixed > base:
        raise ValidationError(
            f"{path}.fixedDiscount",
            f"percentage and fixed discounts together exceed the line amount {base}",
            Constraint.DISCOUNT_EXCEEDS_BASE,
        )


def validate_quote_discount(discount: QuoteDiscount):
    """Checks that do not depend on line totals."""
    path = "quoteDiscount"
    try:
        kind = DiscountKind(discount.kind)
    except ValueError:
        raise ValidationError(
            f"{path}.kind",
            f"must be one of percentage, fixed_amount, got {discount.kind!r}",
            Constraint.INVALID_CHOICE,
        ) from None
    if kind is DiscountKind.PERCENTAGE:
        _require_percentage(discount.value, f"{path}.value")
    else:
        value = to_decimal(discount.value, f"{path}.value")
        if value < ZERO:
            raise ValidationError(f"{path}.value", f"must not be negative, got {value}", Constraint.NON_NEGATIVE_REQUIRED)
        _require_bounded(value, f"{path}.value")


def validate_quote_discount_base(discount: QuoteDiscount, base: Decimal, decimals: int = 2):
    """A fixed quote discount may not exceed the sum of line totals."""
    if DiscountKind(discount.kind) is not DiscountKind.FIXED_AMOUNT:
        return
    value = round_currency(to_decimal(discount.value, "quoteDiscount.value"), decimals)
    if value > base:
        raise ValidationError(
            "quoteDiscount.value",
            f"fixed discount {value} exceeds the sum of line totals {base}",
            Constraint.DISCOUNT_EXCEEDS_BASE,
        )


def validate_quote(quote: QuoteInput, decimals_for: Callable[[str], int] = lambda currency: 2):
    """
    Validate a whole quote.

    Raises ValidationError on the first violation. The fixed quote discount
    bound is checked separately once line totals are known.
    """
    _require_text(quote.currency, "currency")
    if not quote.line_items:
        raise ValidationError("lineItems", "at least one line item is required", Constraint.NON_EMPTY_REQUIRED)

    decimals = decimals_for(quote.currency)
    for index, item in enumerate(quote.line_items):
        validate_line_item(item, index, quote.currency, decimals)

    if quote.quote_discount is not None:
        validate_quote_discount(quote.quote_discount)
