"""Identifier generation for new categories and line items."""
from __future__ import annotations

import uuid

LINE_ITEM_PREFIX = "line"
CATEGORY_PREFIX = "cat"


def generate_id(prefix: str) -> str:
    """Return ``<prefix>-<uuid4 hex>``; the exact format is not part of any contract."""
    prefix = (prefix or "").strip()
    token = uuid.uuid4().hex
    return f"{prefix}-{token}" if prefix else token


def generate_line_item_id() -> str:
    return generate_id(LINE_ITEM_PREFIX)


def generate_category_id() -> str:
    return generate_id(CATEGORY_PREFIX)
