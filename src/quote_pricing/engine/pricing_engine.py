"""
Quote Pricing Engine - exact decimal pricing with an optional audit trace.

Turns fully priced line items plus optional discounts into per-line results,
quote totals and a tax breakdown grouped by effective rate. The engine is a
pure function of its input: no I/O, no logging, no shared mutable state.
"""
from decimal import Decimal, localcontext
from typing import Optional

from ..config.settings import Settings, get_settings
from .errors import ValidationError
from .models import (
    DiscountKind,
    LineCalculationResult,
    LineItemInput,
    LineTrace,
    MoneyAmount,
    QuoteDiscount,
    QuoteInput,
    QuoteResult,
    QuoteSummary,
    QuoteTotals,
    QuoteTrace,
    TaxBreakdownEntry,
)
from .money import (
    MONEY_CONTEXT,
    ZERO,
    format_rate,
    line_subtotal,
    percentage_of,
    round_currency,
    sum_money,
    tax_exclusive_price,
    to_decimal,
)
from .validation import validate_quote, validate_quote_discount_base


class PricingEngine:
    """
    Prices a quote line by line, then aggregates.

    Line pipeline:
    1. Tax-inclusive unit prices are converted to tax-exclusive (once, unrounded)
    2. Subtotal = quantity × exclusive unit price
    3. Percentage discount on the subtotal, plus the fixed discount (additive)
    4. Taxable = subtotal - discounts
    5. Tax = taxable × rate, half-up to the currency minor unit (0 when exempt)
    6. Total = taxable + tax

    Quote level: line figures are summed; the quote discount is taken off the
    sum of line totals and never reduces line tax.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def calculate(self, quote: QuoteInput) -> QuoteResult:
        """Price a quote. Raises ValidationError for invalid input."""
        return self._calculate(quote, trace=None)

    def calculate_with_trace(self, quote: QuoteInput) -> QuoteResult:
        """Price a quote and attach the trace of every intermediate value."""
        return self._calculate(quote, trace=QuoteTrace())

    def is_valid(self, quote: QuoteInput) -> bool:
        try:
            self.calculate(quote)
        except ValidationError:
            return False
        return True

    def tax_label(self, rate: Decimal) -> str:
        """Cosmetic label for a tax breakdown bucket."""
        if rate == ZERO:
            return "Exempt (0%)"
        if rate == self.settings.standard_tax_rate:
            return f"{self.settings.standard_tax_name} ({format_rate(rate)}%)"
        return f"Tax ({format_rate(rate)}%)"

    def _calculate(self, quote: QuoteInput, trace: Optional[QuoteTrace]) -> QuoteResult:
        with localcontext(MONEY_CONTEXT):
            validate_quote(quote, self.settings.decimals_for)

            currency = quote.currency
            decimals = self.settings.decimals_for(currency)

            lines = []
            for index, item in enumerate(quote.line_items):
                line_trace = trace.start_line(index + 1, item.description) if trace is not None else None
                lines.append(self._calculate_line(index + 1, item, currency, decimals, line_trace))

            totals, summary = self._aggregate(lines, quote.quote_discount, currency, decimals, trace)
            tax_breakdown = self.build_tax_breakdown(lines, currency, decimals)

        return QuoteResult(
            currency=currency,
            line_calculations=tuple(lines),
            totals=totals,
            tax_breakdown=tax_breakdown,
            summary=summary,
            trace=trace,
        )

    def _calculate_line(
        self,
        line_number: int,
        item: LineItemInput,
        currency: str,
        decimals: int,
        trace: Optional[LineTrace] = None,
    ) -> LineCalculationResult:
        """Run the line pipeline for one validated item."""
        quantity = to_decimal(item.quantity)
        tax_rate = to_decimal(item.tax_rate)
        unit_price = to_decimal(item.unit_price.amount)
        pct = to_decimal(item.percentage_discount) if item.percentage_discount is not None else None

        if trace is not None:
            trace.inputs.update({
                "quantity": quantity,
                "unit": item.unit,
                "unitPrice": item.unit_price,
                "taxRate": tax_rate,
                "taxInclusive": item.tax_inclusive,
                "isTaxExempt": item.is_tax_exempt,
                "percentageDiscount": pct,
                "fixedDiscount": item.fixed_discount,
            })

        def money(amount: Decimal) -> MoneyAmount:
            return MoneyAmount(amount, currency)

        exclusive_price = tax_exclusive_price(unit_price, tax_rate, item.tax_inclusive)
        if trace is not None and item.tax_inclusive:
            trace.add_trace(
                "taxExclusiveUnitPrice",
                f"{unit_price:f} / (1 + {format_rate(tax_rate)}/100)",
                f"{exclusive_price:f}",
            )

        subtotal = line_subtotal(quantity, exclusive_price, decimals)
        if trace is not None:
            trace.record("subtotal", money(subtotal), f"Quantity {quantity:f} × {exclusive_price:f}")

        pct_amount = round_currency(ZERO, decimals)
        if pct is not None:
            pct_amount = percentage_of(subtotal, pct, decimals)
            if trace is not None:
                trace.record("percentageDiscount", money(pct_amount), f"{format_rate(pct)}% of {subtotal:f}")

        fixed_amount = round_currency(ZERO, decimals)
        if item.fixed_discount is not None:
            fixed_amount = round_currency(to_decimal(item.fixed_discount.amount), decimals)
            if trace is not None:
                trace.record("fixedDiscount", money(fixed_amount), "Fixed discount")

        discount = pct_amount + fixed_amount
        taxable = subtotal - discount
        if trace is not None:
            trace.record("discountAmount", money(discount), f"{pct_amount:f} + {fixed_amount:f}")
            trace.record("taxableAmount", money(taxable), f"{subtotal:f} - {discount:f}")

        effective_rate = ZERO if item.is_tax_exempt else tax_rate
        if effective_rate == ZERO:
            tax = round_currency(ZERO, decimals)
            reason = "Tax exempt" if item.is_tax_exempt else "Zero-rated"
        else:
            tax = percentage_of(taxable, effective_rate, decimals)
            reason = f"{format_rate(effective_rate)}% of {taxable:f}, rounded half-up"
        if trace is not None:
            trace.record("taxAmount", money(tax), reason)

        total = taxable + tax
        if trace is not None:
            trace.record("totalAmount", money(total), f"{taxable:f} + {tax:f}")

        return LineCalculationResult(
            line_number=line_number,
            description=item.description,
            quantity=quantity,
            unit_price=money(exclusive_price),
            tax_rate=effective_rate,
            subtotal=money(subtotal),
            discount_amount=money(discount),
            taxable_amount=money(taxable),
            tax_amount=money(tax),
            total_amount=money(total),
        )

    def _aggregate(
        self,
        lines: list[LineCalculationResult],
        quote_discount: Optional[QuoteDiscount],
        currency: str,
        decimals: int,
        trace: Optional[QuoteTrace] = None,
    ) -> tuple[QuoteTotals, QuoteSummary]:
        """Sum line figures and apply the quote-level discount."""
        subtotal = sum_money((line.subtotal for line in lines), currency, decimals)
        taxable = sum_money((line.taxable_amount for line in lines), currency, decimals)
        tax = sum_money((line.tax_amount for line in lines), currency, decimals)
        line_total = sum_money((line.total_amount for line in lines), currency, decimals)
        line_discount = sum_money((line.discount_amount for line in lines), currency, decimals)

        if trace is not None:
            trace.inputs.update({
                "lineTotals": [line.total_amount for line in lines],
                "quoteDiscountKind": quote_discount.kind if quote_discount else None,
                "quoteDiscountValue": to_decimal(quote_discount.value) if quote_discount else None,
                "quoteDiscountDescription": quote_discount.description if quote_discount else None,
            })
            trace.record("subtotal", subtotal, f"Sum of {len(lines)} line subtotals")
            trace.record("taxableAmount", taxable, "Sum of line taxable amounts")
            trace.record("taxAmount", tax, "Sum of line tax amounts")
            trace.record("lineTotal", line_total, "Sum of line totals")

        discount = round_currency(ZERO, decimals)
        if quote_discount is not None:
            validate_quote_discount_base(quote_discount, line_total.amount, decimals)
            value = to_decimal(quote_discount.value)
            if DiscountKind(quote_discount.kind) is DiscountKind.PERCENTAGE:
                discount = percentage_of(line_total.amount, value, decimals)
                if trace is not None:
                    trace.record(
                        "quotePercentageDiscount",
                        MoneyAmount(discount, currency),
                        f"{format_rate(value)}% of {line_total.amount:f}",
                    )
            else:
                discount = round_currency(value, decimals)
                if trace is not None:
                    trace.record("quoteFixedDiscount", MoneyAmount(discount, currency), "Fixed quote discount")

        grand_total = MoneyAmount(line_total.amount - discount, currency)
        if trace is not None:
            trace.record("grandTotal", grand_total, f"{line_total.amount:f} - {discount:f}")

        totals = QuoteTotals(
            subtotal=subtotal,
            taxable_amount=taxable,
            tax_amount=tax,
            discount_amount=MoneyAmount(discount, currency),
            grand_total=grand_total,
        )
        summary = QuoteSummary(
            total_quantity=sum((line.quantity for line in lines), ZERO),
            total_line_discount=line_discount,
            total_taxable=taxable,
            total_amount=line_total,
        )
        return totals, summary

    def build_tax_breakdown(
        self,
        lines: list[LineCalculationResult],
        currency: str,
        decimals: int = 2,
    ) -> tuple[TaxBreakdownEntry, ...]:
        """
        Group lines by effective rate.

        Bucket tax is the sum of the already-rounded line taxes, so the
        breakdown always adds up to the quote tax.
        """
        groups: dict[Decimal, tuple[Decimal, Decimal]] = {}
        for line in lines:
            taxable, tax = groups.get(line.tax_rate, (ZERO, ZERO))
            groups[line.tax_rate] = (taxable + line.taxable_amount.amount, tax + line.tax_amount.amount)

        return tuple(
            TaxBreakdownEntry(
                rate=rate,
                label=self.tax_label(rate),
                taxable_amount=MoneyAmount(round_currency(taxable, decimals), currency),
                tax_amount=MoneyAmount(round_currency(tax, decimals), currency),
            )
            for rate, (taxable, tax) in sorted(groups.items())
        )


_engine: Optional[PricingEngine] = None


def get_engine() -> PricingEngine:
    """Get the shared engine built from global settings."""
    global _engine
    if _engine is None:
        _engine = PricingEngine()
    return _engine


def calculate(quote: QuoteInput) -> QuoteResult:
    return get_engine().calculate(quote)


def calculate_with_trace(quote: QuoteInput) -> QuoteResult:
    return get_engine().calculate_with_trace(quote)


def is_valid_quote(quote: QuoteInput) -> bool:
    """True when the quote would price without a ValidationError."""
    return get_engine().is_valid(quote)
