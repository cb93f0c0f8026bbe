"""
Golden test cases for pricing engine regression testing.
These tests capture the expected behavior of the pricing engine and
should fail if pricing logic changes unexpectedly.
"""
import csv
import os
from decimal import Decimal

import pytest

from quote_pricing.config.settings import Settings
from quote_pricing.engine import LineItemInput, MoneyAmount, PricingEngine, QuoteInput


@pytest.fixture(scope="module")
def engine():
    """Create a single engine instance for all tests."""
    return PricingEngine(Settings())


def load_golden_cases():
    """Load golden test cases from CSV."""
    cases_path = os.path.join(os.path.dirname(__file__), 'golden_cases.csv')

    cases = []
    with open(cases_path, 'r', newline='', encoding='utf-8') as f:
        reader = csv.DictReader(f)
        for row in reader:
            cases.append(row)

    return cases


def build_line(case) -> LineItemInput:
    return LineItemInput(
        description=case['case_id'],
        quantity=Decimal(case['quantity']),
        unit="each",
        unit_price=MoneyAmount(Decimal(case['unit_price']), "NZD"),
        tax_rate=Decimal(case['tax_rate']),
        tax_inclusive=case['tax_inclusive'] == 'true',
        is_tax_exempt=case['tax_exempt'] == 'true',
        percentage_discount=Decimal(case['pct_discount']) if case['pct_discount'] else None,
        fixed_discount=MoneyAmount(Decimal(case['fixed_discount']), "NZD") if case['fixed_discount'] else None,
    )


@pytest.mark.parametrize("case", load_golden_cases(), ids=lambda c: c['case_id'])
def test_golden_case(engine, case):
    """Test that line pricing matches the expected golden case."""
    result = engine.calculate(QuoteInput(line_items=(build_line(case),), currency="NZD"))

    assert len(result.line_calculations) == 1, \
        f"Expected 1 line item, got {len(result.line_calculations)}"

    line = result.line_calculations[0]
    for field, attr in [('subtotal', 'subtotal'), ('discount', 'discount_amount'),
                        ('tax', 'tax_amount'), ('total', 'total_amount')]:
        expected = Decimal(case[f'expected_{field}'])
        actual = getattr(line, attr).amount
        assert actual == expected, \
            f"{field} mismatch for {case['case_id']}: expected {expected}, got {actual}"

    assert result.totals.grand_total.amount == line.total_amount.amount
