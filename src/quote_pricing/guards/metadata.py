"""
Metadata guard - keeps business values out of free-form metadata.

Quote totals, prices and statuses belong in typed fields. Any of these names
found as a key in a metadata mapping (at any depth) is rejected.
"""
from typing import Any, Optional

FORBIDDEN_METADATA_FIELDS = (
    # Monetary amounts
    'subtotal', 'taxTotal', 'grandTotal', 'totalAmount',
    'unitPrice', 'price', 'amount', 'cost',
    'discountAmount', 'taxAmount', 'discountValue',

    # Business calculations
    'quantity', 'qty', 'unit', 'taxRate', 'taxClass',
    'currency', 'exchangeRate', 'rate',

    # Status and totals
    'status', 'totals', 'calculations', 'breakdown',

    # Line item specific
    'lineNumber', 'description', 'sku', 'itemCode',
    'serviceCategoryId', 'rateCardId',

    # Quote specific
    'quoteNumber', 'customerId', 'projectId',
    'validFrom', 'validUntil', 'approvedBy', 'sentAt',
)

_FORBIDDEN = frozenset(FORBIDDEN_METADATA_FIELDS)


class MetadataGuardError(ValueError):
    """A forbidden business field was found in metadata."""

    def __init__(self, field: str, path: str, context: str):
        self.field = field
        self.path = path
        self.context = context
        super().__init__(
            f"Metadata cannot contain business values. Field '{field}' at path '{path}' "
            f"in {context} is forbidden. Business values must be stored in typed fields."
        )

    def to_dict(self) -> dict:
        return {"fieldPath": self.path, "constraint": "forbidden_metadata_field", "message": str(self)}


def is_forbidden_field(name: str) -> bool:
    return name in _FORBIDDEN


def validate_metadata(data: Optional[Any], context: str):
    """
    Reject metadata holding forbidden keys.

    Nested mappings are walked; lists are not. None and non-dict values pass.
    """
    if not isinstance(data, dict):
        return

    def check(obj: dict, prefix: str):
        for key, value in obj.items():
            path = f"{prefix}.{key}" if prefix else str(key)
            if is_forbidden_field(key):
                raise MetadataGuardError(field=key, path=path, context=context)
            if isinstance(value, dict):
                check(value, path)

    check(data, "")


def validate_quote_metadata(metadata: Optional[Any]):
    validate_metadata(metadata, "quote metadata")


def validate_line_item_metadata(metadata: Optional[Any], line_number: int):
    validate_metadata(metadata, f"quote line item {line_number} metadata")
