from .quotation_items import (
    LineItemCase,
    category,
    line_item,
    line_item_cases,
    line_item_draft,
)

__all__ = [
    "line_item",
    "line_item_draft",
    "category",
    "LineItemCase",
    "line_item_cases",
]
