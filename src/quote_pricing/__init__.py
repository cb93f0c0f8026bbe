"""
Quote Pricing Package

Exact-decimal pricing and tax calculation for business quotes.
Turns priced line items and discounts into line results, quote totals,
a tax breakdown by rate and an optional audit trace.
"""

__version__ = "1.0.0"
