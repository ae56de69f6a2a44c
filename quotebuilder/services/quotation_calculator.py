"""Pure calculation helpers for quotation charges."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from quotebuilder.domain.quotation_models import (
    ZERO,
    ChargeCategory,
    FinancialSummary,
    LineItem,
    nan_on_invalid,
    to_decimal,
)

DEFAULT_TAX_RATE = Decimal("0.12")
TWOPLACES = Decimal("0.01")

_CURRENCY_SYMBOLS = {
    "USD": "$",
    "PHP": "₱",
    "EUR": "€",
    "CNY": "CN¥",
}


def compute_amount(price: Any, quantity: Any, forex_rate: Any) -> Decimal:
    """Return ``price × quantity × forex_rate`` in the base currency, unrounded."""
    price, quantity, forex_rate = to_decimal(price), to_decimal(quantity), to_decimal(forex_rate)
    with nan_on_invalid():
        return price * quantity * forex_rate


def compute_subtotal(line_items: Iterable[LineItem]) -> Decimal:
    """Sum the amounts of the given line items; an empty list sums to zero."""
    with nan_on_invalid():
        return sum((item.amount for item in line_items), ZERO)


def compute_summary(
    categories: Iterable[ChargeCategory],
    tax_rate: Any = DEFAULT_TAX_RATE,
    other_charges: Any = 0,
) -> FinancialSummary:
    """Partition every line item into taxed and non-taxed buckets and total them.

    The category subtotals are not reused: each line item is visited directly,
    so the result only depends on the line items themselves. ``tax_rate`` is a
    fraction (0.12 for 12%) and is not clamped. ``other_charges`` is added after
    tax and is never taxed. Infinite or NaN inputs propagate as NaN rather
    than raising.
    """
    rate = to_decimal(tax_rate)
    other = to_decimal(other_charges)

    with nan_on_invalid():
        subtotal_non_taxed = ZERO
        subtotal_taxed = ZERO
        for category in categories:
            for item in category.line_items:
                if item.is_taxed:
                    subtotal_taxed += item.amount
                else:
                    subtotal_non_taxed += item.amount

        tax_amount = subtotal_taxed * rate
        grand_total = subtotal_non_taxed + subtotal_taxed + tax_amount + other

    return FinancialSummary(
        subtotal_non_taxed=subtotal_non_taxed,
        subtotal_taxed=subtotal_taxed,
        tax_rate=rate,
        tax_amount=tax_amount,
        other_charges=other,
        grand_total=grand_total,
    )


def recalculate_category(category: ChargeCategory) -> ChargeCategory:
    """Return the category rebuilt from its line items.

    Amounts and subtotals are derived properties, so the rebuilt value only
    differs in identity; callers use this as the one place a category is
    refreshed after its items change.
    """
    return category.with_line_items(category.line_items)


def percent_to_rate(percent: Any) -> Decimal:
    """Convert a percentage typed in a form (12) to the fraction used for tax (0.12)."""
    return to_decimal(percent) / Decimal(100)


def rate_to_percent(rate: Any) -> Decimal:
    return to_decimal(rate) * Decimal(100)


def round_to_2_decimals(value: Any) -> Decimal:
    """Round half-up to two places for display; NaN and infinities pass through."""
    value = to_decimal(value)
    if not value.is_finite():
        return value
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def format_currency(amount: Any, currency: str = "USD") -> str:
    """Format an amount with its currency symbol, thousands separators and 2 decimals."""
    code = (currency or "").strip().upper()
    rounded = round_to_2_decimals(amount)
    symbol = _CURRENCY_SYMBOLS.get(code, f"{code} " if code else "")
    if rounded.is_nan():
        return f"{symbol}NaN"
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,.2f}"
