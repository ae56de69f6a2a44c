"""Selling-price markup helpers.

A selling line starts from the vendor's base cost and adds a markup that the
user may type either as an amount or as a percentage; the other half is kept
in sync. ``final_price`` is always ``base_cost + amount_added``.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any

from quotebuilder.domain.quotation_models import ZERO, MarkupBreakdown, to_decimal

_HUNDRED = Decimal(100)


def apply_markup_amount(base_cost: Any, amount_added: Any) -> MarkupBreakdown:
    """Set the markup as an amount and derive the percentage from it."""
    base = to_decimal(base_cost)
    amount = to_decimal(amount_added)
    percent = (amount / base) * _HUNDRED if base > ZERO else ZERO
    return MarkupBreakdown(base_cost=base, amount_added=amount, percentage_added=percent)


def apply_markup_percent(base_cost: Any, percentage_added: Any) -> MarkupBreakdown:
    """Set the markup as a percentage and derive the amount from it."""
    base = to_decimal(base_cost)
    percent = to_decimal(percentage_added)
    return MarkupBreakdown(
        base_cost=base,
        amount_added=(base * percent) / _HUNDRED,
        percentage_added=percent,
    )


def change_base_cost(breakdown: MarkupBreakdown, base_cost: Any) -> MarkupBreakdown:
    """Replace the base cost, keeping the percentage and recomputing the amount."""
    return apply_markup_percent(base_cost, breakdown.percentage_added)
