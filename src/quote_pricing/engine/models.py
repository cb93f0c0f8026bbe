"""
Data models for the pricing engine.

Inputs and results are frozen dataclasses holding Decimal amounts.
Trace objects are mutable accumulators filled in while a quote is priced.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


def _plain(value: Any) -> Any:
    """Convert trace values to JSON-friendly primitives."""
    if isinstance(value, MoneyAmount):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return f"{value:f}"
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


@dataclass(frozen=True)
class MoneyAmount:
    """An exact amount in an ISO-4217 currency."""
    amount: Decimal
    currency: str

    def to_dict(self) -> dict:
        return {"amount": f"{self.amount:f}", "currency": self.currency}


class DiscountKind(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


@dataclass(frozen=True)
class LineItemInput:
    """A fully priced line on a quote."""
    description: str
    quantity: Decimal
    unit: str
    unit_price: MoneyAmount
    tax_rate: Decimal  # percentage, e.g. 15 for 15%
    tax_inclusive: bool = False
    is_tax_exempt: bool = False
    percentage_discount: Optional[Decimal] = None
    fixed_discount: Optional[MoneyAmount] = None


@dataclass(frozen=True)
class QuoteDiscount:
    """Discount applied once to the sum of line totals."""
    kind: DiscountKind
    value: Decimal
    description: str = ""


@dataclass(frozen=True)
class QuoteInput:
    """A quote to price: ordered lines, optional quote discount, currency."""
    line_items: tuple[LineItemInput, ...]
    currency: str
    quote_discount: Optional[QuoteDiscount] = None


@dataclass(frozen=True)
class LineCalculationResult:
    line_number: int
    description: str
    quantity: Decimal
    unit_price: MoneyAmount  # tax-exclusive
    tax_rate: Decimal  # effective rate, 0 when exempt
    subtotal: MoneyAmount
    discount_amount: MoneyAmount
    taxable_amount: MoneyAmount
    tax_amount: MoneyAmount
    total_amount: MoneyAmount

    def to_dict(self) -> dict:
        return {
            "lineNumber": self.line_number,
            "description": self.description,
            "quantity": _plain(self.quantity),
            "unitPrice": self.unit_price.to_dict(),
            "taxRate": _plain(self.tax_rate),
            "subtotal": self.subtotal.to_dict(),
            "discountAmount": self.discount_amount.to_dict(),
            "taxableAmount": self.taxable_amount.to_dict(),
            "taxAmount": self.tax_amount.to_dict(),
            "totalAmount": self.total_amount.to_dict(),
        }


@dataclass(frozen=True)
class TaxBreakdownEntry:
    rate: Decimal
    label: str
    taxable_amount: MoneyAmount
    tax_amount: MoneyAmount

    def to_dict(self) -> dict:
        return {
            "rate": _plain(self.rate),
            "label": self.label,
            "taxableAmount": self.taxable_amount.to_dict(),
            "taxAmount": self.tax_amount.to_dict(),
        }


@dataclass(frozen=True)
class QuoteTotals:
    subtotal: MoneyAmount
    taxable_amount: MoneyAmount
    tax_amount: MoneyAmount
    discount_amount: MoneyAmount  # quote-level discount only
    grand_total: MoneyAmount

    def to_dict(self) -> dict:
        return {
            "subtotal": self.subtotal.to_dict(),
            "discountAmount": self.discount_amount.to_dict(),
            "taxableAmount": self.taxable_amount.to_dict(),
            "taxAmount": self.tax_amount.to_dict(),
            "grandTotal": self.grand_total.to_dict(),
        }


@dataclass(frozen=True)
class QuoteSummary:
    """Aggregate line figures before the quote-level discount."""
    total_quantity: Decimal
    total_line_discount: MoneyAmount
    total_taxable: MoneyAmount
    total_amount: MoneyAmount

    def to_dict(self) -> dict:
        return {
            "totalQuantity": _plain(self.total_quantity),
            "totalLineDiscount": self.total_line_discount.to_dict(),
            "totalTaxable": self.total_taxable.to_dict(),
            "totalAmount": self.total_amount.to_dict(),
        }


@dataclass
class TraceStep:
    """A single step in the calculation trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class LineTrace:
    """Input snapshot and named intermediate values for one line."""
    line_number: int
    description: str
    inputs: dict[str, Any] = field(default_factory=dict)
    calculations: dict[str, MoneyAmount] = field(default_factory=dict)
    steps: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace for this line."""
        self.steps.append(TraceStep(step=step, description=description, value=value))

    def record(self, name: str, amount: MoneyAmount, description: str):
        """Store a named intermediate amount and log it as a step."""
        self.calculations[name] = amount
        self.add_trace(name, description, f"{amount.amount:f}")

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = [f"Line {self.line_number}: {self.description}"]
        for t in self.steps:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "lineNumber": self.line_number,
            "description": self.description,
            "inputs": _plain(self.inputs),
            "calculations": _plain(self.calculations),
            "steps": [{"step": t.step, "description": t.description, "value": t.value} for t in self.steps],
        }


@dataclass
class QuoteTrace:
    """Quote-level aggregation steps plus every line trace."""
    inputs: dict[str, Any] = field(default_factory=dict)
    calculations: dict[str, MoneyAmount] = field(default_factory=dict)
    steps: list[TraceStep] = field(default_factory=list)
    lines: list[LineTrace] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the quote-level trace."""
        self.steps.append(TraceStep(step=step, description=description, value=value))

    def record(self, name: str, amount: MoneyAmount, description: str):
        self.calculations[name] = amount
        self.add_trace(name, description, f"{amount.amount:f}")

    def start_line(self, line_number: int, description: str) -> LineTrace:
        line = LineTrace(line_number=line_number, description=description)
        self.lines.append(line)
        return line

    def get_trace_text(self) -> str:
        """Get human-readable trace for the whole quote."""
        blocks = [line.get_trace_text() for line in self.lines]
        quote_lines = ["Quote"]
        for t in self.steps:
            if t.value:
                quote_lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                quote_lines.append(f"• {t.step}: {t.description}")
        blocks.append("\n".join(quote_lines))
        return "\n\n".join(blocks)

    def to_dict(self) -> dict:
        return {
            "lines": [line.to_dict() for line in self.lines],
            "quote": {
                "inputs": _plain(self.inputs),
                "calculations": _plain(self.calculations),
                "steps": [{"step": t.step, "description": t.description, "value": t.value} for t in self.steps],
            },
        }


@dataclass(frozen=True)
class QuoteResult:
    """Complete result of a quote calculation."""
    currency: str
    line_calculations: tuple[LineCalculationResult, ...]
    totals: QuoteTotals
    tax_breakdown: tuple[TaxBreakdownEntry, ...]
    summary: QuoteSummary
    # Debug-only view; never part of equality
    trace: Optional[QuoteTrace] = field(default=None, compare=False)

    def to_dict(self) -> dict:
        data = {
            "currency": self.currency,
            "lineCalculations": [line.to_dict() for line in self.line_calculations],
            "totals": self.totals.to_dict(),
            "taxBreakdown": [entry.to_dict() for entry in self.tax_breakdown],
            "summary": self.summary.to_dict(),
        }
        if self.trace is not None:
            data["trace"] = self.trace.to_dict()
        return data
