import os
import sys
from decimal import Decimal

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from quote_pricing.engine import DiscountKind, LineItemInput, MoneyAmount, QuoteDiscount, QuoteInput


def _line(description="Labour", quantity="40", unit_price="150.00", tax_rate="15", currency="NZD",
          unit="hours", tax_inclusive=False, is_tax_exempt=False, percentage_discount=None, fixed_discount=None):
    return LineItemInput(
        description=description,
        quantity=Decimal(quantity) if isinstance(quantity, str) else quantity,
        unit=unit,
        unit_price=MoneyAmount(Decimal(unit_price), currency),
        tax_rate=Decimal(tax_rate) if isinstance(tax_rate, str) else tax_rate,
        tax_inclusive=tax_inclusive,
        is_tax_exempt=is_tax_exempt,
        percentage_discount=Decimal(percentage_discount) if percentage_discount is not None else None,
        fixed_discount=MoneyAmount(Decimal(fixed_discount), currency) if fixed_discount is not None else None,
    )


def _quote(*lines, currency="NZD", discount=None):
    quote_discount = None
    if discount is not None:
        kind, value = discount
        quote_discount = QuoteDiscount(kind=DiscountKind(kind), value=Decimal(value), description="test")
    return QuoteInput(line_items=tuple(lines), currency=currency, quote_discount=quote_discount)


@pytest.fixture
def make_line():
    """Build a LineItemInput from string amounts."""
    return _line


@pytest.fixture
def make_quote():
    """Build a QuoteInput; discount is a (kind, value) pair."""
    return _quote
