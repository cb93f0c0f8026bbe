"""
The debug trace records every intermediate value without changing results.
"""
from decimal import Decimal

import pytest

from quote_pricing.engine import PricingEngine


@pytest.fixture(scope="module")
def engine():
    return PricingEngine()


@pytest.fixture
def quote(make_line, make_quote):
    return make_quote(
        make_line(unit_price="172.50", tax_inclusive=True),
        make_line(description="Materials", quantity="20", unit_price="120.00",
                  percentage_discount="10", fixed_discount="60"),
        discount=("percentage", "5"),
    )


def test_trace_does_not_change_results(engine, quote):
    plain = engine.calculate(quote)
    traced = engine.calculate_with_trace(quote)

    assert plain == traced
    assert plain.trace is None
    assert traced.trace is not None
    assert plain.to_dict() == {k: v for k, v in traced.to_dict().items() if k != "trace"}


def test_line_trace_steps(engine, quote):
    trace = engine.calculate_with_trace(quote).trace
    assert [line.line_number for line in trace.lines] == [1, 2]

    first = trace.lines[0]
    steps = [t.step for t in first.steps]
    assert steps[0] == "taxExclusiveUnitPrice", "Inclusive lines start with the price conversion"
    assert steps[1:] == ["subtotal", "discountAmount", "taxableAmount", "taxAmount", "totalAmount"]
    assert first.calculations["subtotal"].amount == Decimal("6000.00")
    assert first.inputs["taxInclusive"] is True

    second = trace.lines[1]
    assert "taxExclusiveUnitPrice" not in [t.step for t in second.steps]
    assert second.calculations["percentageDiscount"].amount == Decimal("240.00")
    assert second.calculations["fixedDiscount"].amount == Decimal("60.00")
    assert second.calculations["discountAmount"].amount == Decimal("300.00")


def test_trace_values_match_results(engine, quote):
    result = engine.calculate_with_trace(quote)
    for line, line_trace in zip(result.line_calculations, result.trace.lines):
        assert line_trace.calculations["totalAmount"] == line.total_amount
        assert line_trace.calculations["taxAmount"] == line.tax_amount

    quote_trace = result.trace
    assert quote_trace.calculations["grandTotal"] == result.totals.grand_total
    assert quote_trace.calculations["quotePercentageDiscount"] == result.totals.discount_amount
    assert quote_trace.inputs["quoteDiscountKind"].value == "percentage"


def test_fixed_quote_discount_step(engine, make_line, make_quote):
    trace = engine.calculate_with_trace(make_quote(make_line(), discount=("fixed_amount", "100"))).trace
    steps = [t.step for t in trace.steps]
    assert "quoteFixedDiscount" in steps
    assert "quotePercentageDiscount" not in steps
    assert steps[-1] == "grandTotal"


def test_exempt_line_trace(engine, make_line, make_quote):
    trace = engine.calculate_with_trace(make_quote(make_line(is_tax_exempt=True))).trace
    tax_step = [t for t in trace.lines[0].steps if t.step == "taxAmount"][0]
    assert tax_step.description == "Tax exempt"
    assert tax_step.value == "0.00"


def test_trace_text(engine, quote):
    text = engine.calculate_with_trace(quote).trace.get_trace_text()
    assert text.startswith("Line 1: Labour")
    assert "→ subtotal:" in text
    assert "Line 2: Materials" in text
    assert "\nQuote\n" in text
    assert "• grandTotal:" in text


def test_trace_serialization(engine, quote):
    data = engine.calculate_with_trace(quote).to_dict()["trace"]

    assert set(data) == {"lines", "quote"}
    assert set(data["quote"]) == {"inputs", "calculations", "steps"}
    line = data["lines"][0]
    assert line["lineNumber"] == 1
    assert line["inputs"]["unitPrice"] == {"amount": "172.50", "currency": "NZD"}
    assert line["inputs"]["quantity"] == "40"
    assert line["calculations"]["totalAmount"] == {"amount": "6900.00", "currency": "NZD"}
    assert data["quote"]["inputs"]["quoteDiscountKind"] == "percentage"
    assert data["quote"]["steps"][-1]["step"] == "grandTotal"
