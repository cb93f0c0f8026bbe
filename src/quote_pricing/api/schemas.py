"""
Request models for the pricing API.

Field names follow the JSON wire format (camelCase); Python attributes are
snake_case. Semantic checks are left to the engine so they surface as
ValidationError with a field path.
"""
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..config.settings import Settings, get_settings
from ..engine.models import DiscountKind, LineItemInput, MoneyAmount, QuoteDiscount, QuoteInput


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MoneyAmountModel(WireModel):
    amount: Decimal
    currency: str

    def to_money(self) -> MoneyAmount:
        return MoneyAmount(amount=self.amount, currency=self.currency.upper())


class LineItemModel(WireModel):
    """A priced line. taxRate defaults to the standard rate when omitted."""
    description: str
    quantity: Decimal
    unit: str
    unit_price: MoneyAmountModel
    tax_rate: Optional[Decimal] = None
    tax_inclusive: bool = False
    is_tax_exempt: bool = False
    percentage_discount: Optional[Decimal] = None
    fixed_discount: Optional[MoneyAmountModel] = None
    metadata: Optional[dict[str, Any]] = None

    def to_input(self, settings: Settings) -> LineItemInput:
        return LineItemInput(
            description=self.description,
            quantity=self.quantity,
            unit=self.unit,
            unit_price=self.unit_price.to_money(),
            tax_rate=self.tax_rate if self.tax_rate is not None else settings.standard_tax_rate,
            tax_inclusive=self.tax_inclusive,
            is_tax_exempt=self.is_tax_exempt,
            percentage_discount=self.percentage_discount,
            fixed_discount=self.fixed_discount.to_money() if self.fixed_discount else None,
        )


class QuoteDiscountModel(WireModel):
    kind: Literal["percentage", "fixed_amount"]
    value: Decimal
    description: str = ""

    def to_discount(self) -> QuoteDiscount:
        return QuoteDiscount(kind=DiscountKind(self.kind), value=self.value, description=self.description)


class QuoteRequest(WireModel):
    """Body of the calculate endpoints."""
    line_items: list[LineItemModel] = Field(default_factory=list)
    quote_discount: Optional[QuoteDiscountModel] = None
    currency: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None

    def to_quote(self, settings: Optional[Settings] = None) -> QuoteInput:
        settings = settings or get_settings()
        return QuoteInput(
            line_items=tuple(item.to_input(settings) for item in self.line_items),
            currency=(self.currency or settings.default_currency).upper(),
            quote_discount=self.quote_discount.to_discount() if self.quote_discount else None,
        )
