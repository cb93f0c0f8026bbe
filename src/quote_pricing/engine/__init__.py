"""Engine subpackage - core pricing, tax and discount logic."""
from .errors import Constraint, ValidationError
from .models import (
    DiscountKind,
    LineCalculationResult,
    LineItemInput,
    MoneyAmount,
    QuoteDiscount,
    QuoteInput,
    QuoteResult,
    QuoteTotals,
    QuoteTrace,
    TaxBreakdownEntry,
)
from .pricing_engine import PricingEngine, calculate, calculate_with_trace, is_valid_quote

__all__ = [
    'PricingEngine', 'calculate', 'calculate_with_trace', 'is_valid_quote',
    'ValidationError', 'Constraint',
    'MoneyAmount', 'LineItemInput', 'QuoteDiscount', 'DiscountKind', 'QuoteInput',
    'LineCalculationResult', 'TaxBreakdownEntry', 'QuoteTotals', 'QuoteResult', 'QuoteTrace',
]
