"""Boundary validation for line item drafts and quotation inputs.

In ``PERMISSIVE`` mode only values that cannot be read as numbers are rejected,
matching how quotations were historically entered and corrected by hand. In
``STRICT`` mode negative prices or quantities, non-positive forex rates,
non-finite numbers, tax rates outside ``[0, 1]`` and negative other charges
are rejected as well.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from quotebuilder.domain.quotation_models import (
    ZERO,
    Currency,
    LineItemDraft,
    ValidationMode,
    to_decimal,
)
from quotebuilder.exceptions import (
    LineItemValidationError,
    QuotationValidationError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_ONE = Decimal("1")


def parse_number(value: Any, field: str) -> Decimal:
    """Coerce a form value to Decimal, raising ``ValidationError`` when it is not numeric."""
    try:
        return to_decimal(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field} must be a number, got {value!r}") from exc


def validate_line_item(
    draft: LineItemDraft, mode: ValidationMode = ValidationMode.PERMISSIVE
) -> LineItemDraft:
    """Return the draft unchanged when it is acceptable under ``mode``."""
    if not isinstance(draft.currency, Currency):
        raise LineItemValidationError(
            f"Unsupported currency: {draft.currency!r}", field="currency"
        )
    if mode is ValidationMode.PERMISSIVE:
        return draft

    for field_name in ("price", "quantity", "forex_rate"):
        value = getattr(draft, field_name)
        if not value.is_finite():
            raise LineItemValidationError(
                f"{field_name} must be a finite number", field=field_name
            )
    if draft.price < ZERO:
        raise LineItemValidationError("price cannot be negative", field="price")
    if draft.quantity < ZERO:
        raise LineItemValidationError("quantity cannot be negative", field="quantity")
    if draft.forex_rate <= ZERO:
        raise LineItemValidationError(
            "forex_rate must be greater than zero", field="forex_rate"
        )
    if draft.currency.is_base() and draft.forex_rate != _ONE:
        logger.debug(
            "Base-currency line %r carries forex rate %s", draft.description, draft.forex_rate
        )
    return draft


def validate_summary_inputs(
    tax_rate: Any,
    other_charges: Any,
    mode: ValidationMode = ValidationMode.PERMISSIVE,
) -> tuple[Decimal, Decimal]:
    """Parse and check the quotation-level tax rate and other charges."""
    rate = parse_number(tax_rate, "tax_rate")
    other = parse_number(other_charges, "other_charges")
    if mode is ValidationMode.PERMISSIVE:
        return rate, other

    if not rate.is_finite() or not other.is_finite():
        raise QuotationValidationError("tax_rate and other_charges must be finite")
    if rate < ZERO or rate > _ONE:
        raise QuotationValidationError(
            f"tax_rate must be a fraction between 0 and 1, got {rate}"
        )
    if other < ZERO:
        raise QuotationValidationError("other_charges cannot be negative")
    return rate, other
