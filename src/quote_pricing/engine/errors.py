"""
Errors raised by the pricing engine.

The engine has a single failure mode: the input is invalid. Every violation
is reported as a ValidationError before any arithmetic is done for the quote.
"""
from enum import Enum


class Constraint(str, Enum):
    """Name of the rule a rejected field violated."""
    NON_EMPTY_REQUIRED = "non_empty_required"
    POSITIVE_REQUIRED = "positive_required"
    NON_NEGATIVE_REQUIRED = "non_negative_required"
    PERCENTAGE_RANGE = "percentage_range"
    DISCOUNT_EXCEEDS_BASE = "discount_exceeds_base"
    CURRENCY_MISMATCH = "currency_mismatch"
    DECIMAL_REQUIRED = "decimal_required"
    AMOUNT_OUT_OF_RANGE = "amount_out_of_range"
    INVALID_CHOICE = "invalid_choice"


class ValidationError(ValueError):
    """
    Invalid quote input.

    Attributes:
        field_path: Location of the offending value, e.g. ``lineItems[2].fixedDiscount``
        message: Human readable explanation
        constraint: The violated Constraint
    """

    def __init__(self, field_path: str, message: str, constraint: Constraint):
        self.field_path = field_path
        self.message = message
        self.constraint = Constraint(constraint)
        super().__init__(f"{field_path}: {message} [{self.constraint.value}]")

    def to_dict(self) -> dict:
        return {
            "fieldPath": self.field_path,
            "constraint": self.constraint.value,
            "message": self.message,
        }
