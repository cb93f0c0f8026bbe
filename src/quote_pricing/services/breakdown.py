"""
Display helpers for quote results.

String breakdowns for rendering plus pandas DataFrame views used by the UI.
"""
from decimal import Decimal, localcontext
from typing import Optional

import pandas as pd

from ..config.settings import Settings, get_settings
from ..engine.models import LineCalculationResult, MoneyAmount, QuoteResult, QuoteTotals, QuoteTrace
from ..engine.money import HUNDRED, MONEY_CONTEXT, ZERO, format_money, format_rate, round_currency


def _decimals(currency: str, settings: Optional[Settings]) -> int:
    return (settings or get_settings()).decimals_for(currency)


def _money_or_dash(value: MoneyAmount, decimals: int) -> str:
    return "-" if value.amount.is_zero() else format_money(value, decimals)


def line_breakdown(line: LineCalculationResult, settings: Optional[Settings] = None) -> dict[str, str]:
    """Display strings for one line; zero discount and tax show as '-'."""
    decimals = _decimals(line.subtotal.currency, settings)
    return {
        'description': line.description,
        'quantity': f"{line.quantity.normalize():f}",
        'unit_price': format_money(line.unit_price, decimals),
        'subtotal': format_money(line.subtotal, decimals),
        'discount': _money_or_dash(line.discount_amount, decimals),
        'taxable': format_money(line.taxable_amount, decimals),
        'tax': _money_or_dash(line.tax_amount, decimals),
        'total': format_money(line.total_amount, decimals),
    }


def totals_breakdown(totals: QuoteTotals, settings: Optional[Settings] = None) -> dict[str, str]:
    decimals = _decimals(totals.subtotal.currency, settings)
    return {
        'subtotal': format_money(totals.subtotal, decimals),
        'discount': _money_or_dash(totals.discount_amount, decimals),
        'taxable': format_money(totals.taxable_amount, decimals),
        'tax': _money_or_dash(totals.tax_amount, decimals),
        'grand_total': format_money(totals.grand_total, decimals),
    }


def quote_breakdown(result: QuoteResult, settings: Optional[Settings] = None) -> dict:
    """Display strings for every line and the totals."""
    return {
        'lines': [line_breakdown(line, settings) for line in result.line_calculations],
        'totals': totals_breakdown(result.totals, settings),
    }


def totals_percentages(totals: QuoteTotals) -> dict[str, Decimal]:
    """Quote discount and tax as a percentage of the subtotal, to two decimals."""
    subtotal = totals.subtotal.amount
    if subtotal.is_zero():
        return {'discount_percentage': round_currency(ZERO), 'tax_percentage': round_currency(ZERO)}
    with localcontext(MONEY_CONTEXT):
        return {
            'discount_percentage': round_currency(totals.discount_amount.amount / subtotal * HUNDRED),
            'tax_percentage': round_currency(totals.tax_amount.amount / subtotal * HUNDRED),
        }


def debug_payload(result: QuoteResult, settings: Optional[Settings] = None) -> dict:
    """
    Wire form of a traced result with display strings attached.

    Each trace line gets its line_breakdown, the quote trace gets the
    totals_breakdown and totals_percentages.
    """
    data = result.to_dict()
    trace = data.get('trace')
    if trace is None:
        return data
    for line_data, line in zip(trace['lines'], result.line_calculations):
        line_data['breakdown'] = line_breakdown(line, settings)
    trace['quote']['breakdown'] = totals_breakdown(result.totals, settings)
    trace['quote']['percentages'] = {
        key: f"{value:f}" for key, value in totals_percentages(result.totals).items()
    }
    return data


def lines_frame(result: QuoteResult) -> pd.DataFrame:
    """One row per line with exact Decimal amounts."""
    return pd.DataFrame([{
        'Line': line.line_number,
        'Description': line.description,
        'Qty': line.quantity,
        'Unit Price': line.unit_price.amount,
        'Subtotal': line.subtotal.amount,
        'Discount': line.discount_amount.amount,
        'Taxable': line.taxable_amount.amount,
        'Tax Rate': line.tax_rate,
        'Tax': line.tax_amount.amount,
        'Total': line.total_amount.amount,
    } for line in result.line_calculations])


def tax_breakdown_frame(result: QuoteResult) -> pd.DataFrame:
    return pd.DataFrame([{
        'Rate': f"{format_rate(entry.rate)}%",
        'Label': entry.label,
        'Taxable': entry.taxable_amount.amount,
        'Tax': entry.tax_amount.amount,
    } for entry in result.tax_breakdown])


def trace_frame(trace: QuoteTrace) -> pd.DataFrame:
    """Flatten a trace: one row per step, quote-level steps have no line number."""
    rows = []
    for line in trace.lines:
        for t in line.steps:
            rows.append({'Line': line.line_number, 'Step': t.step, 'Description': t.description, 'Value': t.value})
    for t in trace.steps:
        rows.append({'Line': None, 'Step': t.step, 'Description': t.description, 'Value': t.value})
    return pd.DataFrame(rows, columns=['Line', 'Step', 'Description', 'Value'])
