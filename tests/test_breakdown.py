from decimal import Decimal

import pytest

from quote_pricing.config.settings import Settings
from quote_pricing.engine import PricingEngine
from quote_pricing.services.breakdown import (
    debug_payload,
    line_breakdown,
    lines_frame,
    quote_breakdown,
    tax_breakdown_frame,
    totals_breakdown,
    totals_percentages,
    trace_frame,
)


@pytest.fixture(scope="module")
def settings():
    return Settings()


@pytest.fixture(scope="module")
def engine(settings):
    return PricingEngine(settings)


@pytest.fixture
def result(engine, make_line, make_quote):
    return engine.calculate_with_trace(make_quote(
        make_line(unit_price="172.50", tax_inclusive=True),
        make_line(description="Materials", quantity="20", unit_price="120.00", percentage_discount="10"),
        make_line(description="Permit", quantity="1", unit_price="80.00", is_tax_exempt=True),
    ))


def test_line_breakdown(result, settings):
    labour = line_breakdown(result.line_calculations[0], settings)
    assert labour == {
        'description': 'Labour',
        'quantity': '40',
        'unit_price': 'NZD 150.00',
        'subtotal': 'NZD 6000.00',
        'discount': '-',
        'taxable': 'NZD 6000.00',
        'tax': 'NZD 900.00',
        'total': 'NZD 6900.00',
    }

    permit = line_breakdown(result.line_calculations[2], settings)
    assert permit['tax'] == '-', "Exempt lines show no tax"

    materials = line_breakdown(result.line_calculations[1], settings)
    assert materials['discount'] == 'NZD 240.00'


def test_totals_breakdown(result, settings):
    totals = totals_breakdown(result.totals, settings)
    assert totals['subtotal'] == 'NZD 8480.00'
    assert totals['discount'] == '-', "No quote discount was applied"
    assert totals['tax'] == 'NZD 1224.00'
    assert totals['grand_total'] == 'NZD 9464.00'


def test_quote_breakdown(result, settings):
    breakdown = quote_breakdown(result, settings)
    assert set(breakdown) == {'lines', 'totals'}
    assert len(breakdown['lines']) == 3


def test_zero_decimal_currency_breakdown(engine, make_line, make_quote, settings):
    result = engine.calculate(make_quote(make_line(quantity="2", unit_price="1500", currency="JPY"), currency="JPY"))
    assert line_breakdown(result.line_calculations[0], settings)['total'] == 'JPY 3450'


def test_lines_frame(result):
    df = lines_frame(result)
    assert list(df.columns) == [
        'Line', 'Description', 'Qty', 'Unit Price', 'Subtotal', 'Discount', 'Taxable', 'Tax Rate', 'Tax', 'Total',
    ]
    assert len(df) == 3
    assert df['Line'].tolist() == [1, 2, 3]
    assert df.loc[0, 'Total'] == Decimal('6900.00')


def test_tax_breakdown_frame(result):
    df = tax_breakdown_frame(result)
    assert df['Rate'].tolist() == ['0%', '15%']
    assert df['Label'].tolist() == ['Exempt (0%)', 'GST (15%)']
    assert df.loc[1, 'Tax'] == Decimal('1224.00')


def test_trace_frame(result):
    df = trace_frame(result.trace)
    assert list(df.columns) == ['Line', 'Step', 'Description', 'Value']

    line_steps = sum(len(line.steps) for line in result.trace.lines)
    assert len(df) == line_steps + len(result.trace.steps)
    assert df['Line'].isna().sum() == len(result.trace.steps)
    assert df.iloc[-1]['Step'] == 'grandTotal'


def test_totals_percentages(result):
    # tax 1224.00 on a subtotal of 8480.00
    assert totals_percentages(result.totals) == {
        'discount_percentage': Decimal('0.00'),
        'tax_percentage': Decimal('14.43'),
    }


def test_totals_percentages_with_quote_discount(engine, make_line, make_quote):
    totals = engine.calculate(make_quote(make_line(), discount=("percentage", "5"))).totals
    percentages = totals_percentages(totals)
    assert percentages['discount_percentage'] == Decimal('5.75'), "345.00 of a 6000.00 subtotal"
    assert percentages['tax_percentage'] == Decimal('15.00')


def test_totals_percentages_zero_subtotal(engine, make_line, make_quote):
    totals = engine.calculate(make_quote(make_line(unit_price="0"))).totals
    assert totals_percentages(totals) == {'discount_percentage': Decimal('0'), 'tax_percentage': Decimal('0')}


def test_debug_payload(result, settings):
    data = debug_payload(result, settings)

    lines = data['trace']['lines']
    assert lines[0]['breakdown']['subtotal'] == 'NZD 6000.00'
    assert lines[2]['breakdown']['tax'] == '-'
    assert data['trace']['quote']['breakdown']['grand_total'] == 'NZD 9464.00'
    assert data['trace']['quote']['percentages'] == {'discount_percentage': '0.00', 'tax_percentage': '14.43'}
    assert data['totals'] == result.to_dict()['totals']


def test_debug_payload_without_trace(engine, make_line, make_quote, settings):
    result = engine.calculate(make_quote(make_line()))
    assert debug_payload(result, settings) == result.to_dict()
