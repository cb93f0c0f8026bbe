"""
Price a quote from a JSON file and print the calculation trace.

Usage:
    python scripts/debug_quote.py quote.json
"""
import json
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from quote_pricing.api.schemas import QuoteRequest
from quote_pricing.engine import PricingEngine, ValidationError
from quote_pricing.services.breakdown import tax_breakdown_frame

SAMPLE = {
    "currency": "NZD",
    "lineItems": [
        {"description": "Labour", "quantity": "40", "unit": "hours",
         "unitPrice": {"amount": "172.50", "currency": "NZD"}, "taxRate": "15", "taxInclusive": True},
        {"description": "Materials", "quantity": "1", "unit": "lot",
         "unitPrice": {"amount": "2400.00", "currency": "NZD"}, "taxRate": "15", "percentageDiscount": "10"},
    ],
    "quoteDiscount": {"kind": "percentage", "value": "5", "description": "Repeat customer"},
}


def debug(path=None):
    payload = json.loads(Path(path).read_text()) if path else SAMPLE
    quote = QuoteRequest.model_validate(payload).to_quote()

    engine = PricingEngine()
    try:
        result = engine.calculate_with_trace(quote)
    except ValidationError as e:
        print(f"Invalid quote: {e}")
        sys.exit(1)

    print(result.trace.get_trace_text())
    print("\nTax Breakdown:")
    print(tax_breakdown_frame(result).to_string(index=False))
    print(f"\nGrand Total: {result.totals.grand_total.amount} {result.currency}")


if __name__ == "__main__":
    debug(sys.argv[1] if len(sys.argv) > 1 else None)
