"""
Streamlit UI for the Quote Pricing engine.

Features:
- Editable line item grid
- Quote-level discount
- Totals, per-rate tax breakdown and the calculation trace
"""
import streamlit as st
import pandas as pd
import sys
from decimal import Decimal
from pathlib import Path
from datetime import datetime

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from quote_pricing import __version__
from quote_pricing.config.settings import get_settings
from quote_pricing.engine import (
    DiscountKind, LineItemInput, MoneyAmount, PricingEngine, QuoteDiscount, QuoteInput, ValidationError,
)
from quote_pricing.engine.money import format_money
from quote_pricing.services.breakdown import lines_frame, tax_breakdown_frame, totals_percentages, trace_frame


st.set_page_config(
    page_title="Quote Pricing",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_settings_cached():
    """Get cached settings."""
    return get_settings()


@st.cache_resource
def get_engine():
    """Get cached engine instance."""
    return PricingEngine(get_settings_cached())


engine = get_engine()
settings = get_settings_cached()

GRID_COLUMNS = [
    'Description', 'Quantity', 'Unit', 'Unit Price', 'Tax Rate',
    'Tax Inclusive', 'Tax Exempt', 'Discount %', 'Fixed Discount',
]


def starter_lines() -> pd.DataFrame:
    return pd.DataFrame([
        {'Description': 'Labour', 'Quantity': 40.0, 'Unit': 'hours', 'Unit Price': 150.0,
         'Tax Rate': float(settings.standard_tax_rate), 'Tax Inclusive': False, 'Tax Exempt': False,
         'Discount %': None, 'Fixed Discount': None},
        {'Description': 'Materials', 'Quantity': 1.0, 'Unit': 'lot', 'Unit Price': 2400.0,
         'Tax Rate': float(settings.standard_tax_rate), 'Tax Inclusive': False, 'Tax Exempt': False,
         'Discount %': 10.0, 'Fixed Discount': None},
    ], columns=GRID_COLUMNS)


def as_decimal(value):
    """Grid cells come back as floats; go through str so 0.1 stays 0.1."""
    if value is None or pd.isna(value):
        return None
    return Decimal(str(value))


def as_text(value) -> str:
    return "" if value is None or pd.isna(value) else str(value).strip()


def build_quote(grid: pd.DataFrame, currency: str, discount: QuoteDiscount = None) -> QuoteInput:
    items = []
    for _, row in grid.iterrows():
        if pd.isna(row['Description']) and pd.isna(row['Quantity']):
            continue
        fixed = as_decimal(row['Fixed Discount'])
        rate = as_decimal(row['Tax Rate'])
        items.append(LineItemInput(
            description=as_text(row['Description']),
            quantity=as_decimal(row['Quantity']) or Decimal(0),
            unit=as_text(row['Unit']),
            unit_price=MoneyAmount(as_decimal(row['Unit Price']) or Decimal(0), currency),
            tax_rate=rate if rate is not None else settings.standard_tax_rate,
            tax_inclusive=bool(row['Tax Inclusive']),
            is_tax_exempt=bool(row['Tax Exempt']),
            percentage_discount=as_decimal(row['Discount %']),
            fixed_discount=MoneyAmount(fixed, currency) if fixed is not None else None,
        ))
    return QuoteInput(line_items=tuple(items), currency=currency, quote_discount=discount)


# ============================================================================
# SIDEBAR: Quote Settings
# ============================================================================
with st.sidebar:
    st.header("Quote Settings")

    with st.container(border=True):
        currency = st.text_input("Currency", value=settings.default_currency).strip().upper()
        st.caption(f"Minor units: {settings.decimals_for(currency)}")

    st.divider()

    st.subheader("Quote Discount")
    discount_type = st.radio("Type", ["None", "Percentage", "Fixed Amount"], horizontal=True)
    quote_discount = None
    if discount_type != "None":
        discount_value = st.number_input("Value", min_value=0.0, value=0.0, step=1.0)
        discount_desc = st.text_input("Reason", value="")
        kind = DiscountKind.PERCENTAGE if discount_type == "Percentage" else DiscountKind.FIXED_AMOUNT
        quote_discount = QuoteDiscount(kind=kind, value=Decimal(str(discount_value)), description=discount_desc)

    st.divider()
    show_trace = st.toggle("Show calculation trace", value=False)


# ============================================================================
# MAIN CONTENT
# ============================================================================
st.title("Quote Pricing")
st.caption(f"v{__version__} | {settings.standard_tax_name} {settings.standard_tax_rate}% | {datetime.now().strftime('%Y-%m-%d')}")

if 'lines' not in st.session_state:
    st.session_state.lines = starter_lines()

st.markdown("### Line Items")
edited_df = st.data_editor(
    st.session_state.lines,
    use_container_width=True,
    num_rows="dynamic",
    column_config={
        "Description": st.column_config.TextColumn("Description", required=True),
        "Quantity": st.column_config.NumberColumn("Quantity", min_value=0.0, step=0.5),
        "Unit": st.column_config.TextColumn("Unit"),
        "Unit Price": st.column_config.NumberColumn("Unit Price", min_value=0.0, format="%.2f"),
        "Tax Rate": st.column_config.NumberColumn("Tax Rate %", min_value=0.0, max_value=100.0),
        "Tax Inclusive": st.column_config.CheckboxColumn("Incl. Tax"),
        "Tax Exempt": st.column_config.CheckboxColumn("Exempt"),
        "Discount %": st.column_config.NumberColumn("Discount %", min_value=0.0, max_value=100.0),
        "Fixed Discount": st.column_config.NumberColumn("Fixed Discount", min_value=0.0, format="%.2f"),
    },
    hide_index=True,
    key="line_editor"
)

btn_col1, btn_col2, _ = st.columns([1, 1, 4])
with btn_col1:
    if st.button("💾 Save Lines", use_container_width=True):
        st.session_state.lines = edited_df
        st.rerun()
with btn_col2:
    if st.button("🗑️ Reset", use_container_width=True):
        st.session_state.lines = starter_lines()
        st.rerun()

st.divider()

try:
    quote = build_quote(edited_df, currency, quote_discount)
    result = engine.calculate_with_trace(quote) if show_trace else engine.calculate(quote)
except ValidationError as e:
    st.error(f"**{e.field_path}**: {e.message}")
    st.caption(f"Constraint: `{e.constraint.value}`")
    st.stop()

decimals = settings.decimals_for(currency)
totals = result.totals

m1, m2, m3, m4 = st.columns(4)
m1.metric("Subtotal", format_money(totals.subtotal, decimals))
m2.metric("Discount", format_money(totals.discount_amount, decimals))
m3.metric("Tax", format_money(totals.tax_amount, decimals))
m4.metric("Grand Total", format_money(totals.grand_total, decimals))

percentages = totals_percentages(totals)
st.caption(
    f"Discount {percentages['discount_percentage']}% of subtotal | "
    f"Tax {percentages['tax_percentage']}% of subtotal"
)

tab1, tab2, tab3 = st.tabs(["📊 Lines", "🧾 Tax Breakdown", "🔍 Trace"])

with tab1:
    st.dataframe(lines_frame(result), use_container_width=True, hide_index=True)
    st.caption(
        f"Total quantity: {result.summary.total_quantity.normalize():f} | "
        f"Line discounts: {format_money(result.summary.total_line_discount, decimals)}"
    )

with tab2:
    st.dataframe(tax_breakdown_frame(result), use_container_width=True, hide_index=True)

with tab3:
    if result.trace is None:
        st.info("Enable the calculation trace in the sidebar.")
    else:
        st.dataframe(trace_frame(result.trace), use_container_width=True, hide_index=True)
        with st.expander("Plain text"):
            st.code(result.trace.get_trace_text(), language=None)
