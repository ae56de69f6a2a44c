"""Merge charge categories that share a name."""
from __future__ import annotations

import logging
from typing import Callable, Iterable

from quotebuilder.domain.quotation_models import (
    ChargeCategory,
    LineItem,
    MergeResult,
    normalize_category_name,
)
from quotebuilder.services.id_generator import CATEGORY_PREFIX, generate_id

logger = logging.getLogger(__name__)


def merge_categories(categories: Iterable[ChargeCategory]) -> list[ChargeCategory]:
    """Collapse same-named categories into the first one seen, keeping item order."""
    merged: dict[str, ChargeCategory] = {}
    for category in categories:
        key = category.normalized_name()
        existing = merged.get(key)
        if existing is None:
            merged[key] = category
            continue
        merged[key] = existing.with_line_items(existing.line_items + category.line_items)
        logger.debug(
            "Merged %d item(s) from %r into %r",
            len(category.line_items),
            category.name,
            existing.name,
        )
    return list(merged.values())


def merge_into(
    categories: Iterable[ChargeCategory],
    name: str,
    line_items: Iterable[LineItem],
    *,
    id_factory: Callable[[str], str] = generate_id,
) -> tuple[list[ChargeCategory], MergeResult]:
    """Append items to the category called ``name``, creating it when missing.

    ``id_factory`` receives the id prefix, like ``generate_id``.
    """
    items = tuple(line_items)
    key = normalize_category_name(name)
    result_categories = list(categories)

    for index, category in enumerate(result_categories):
        if category.normalized_name() != key:
            continue
        previous = len(category.line_items)
        updated = category.with_line_items(category.line_items + items)
        result_categories[index] = updated
        return result_categories, MergeResult(
            merged=True,
            category_id=category.id,
            items_added=len(items),
            previous_item_count=previous,
            new_item_count=len(updated.line_items),
        )

    created = ChargeCategory(
        id=id_factory(CATEGORY_PREFIX),
        name=name.strip(),
        line_items=items,
        display_order=len(result_categories),
    )
    result_categories.append(created)
    return result_categories, MergeResult(
        merged=False,
        category_id=created.id,
        items_added=len(items),
        previous_item_count=0,
        new_item_count=len(items),
    )
