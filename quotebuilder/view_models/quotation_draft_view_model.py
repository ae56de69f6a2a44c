from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any, Callable, Iterable, Sequence

from quotebuilder.domain.quotation_models import (
    ChargeCategory,
    Currency,
    FinancialSummary,
    LineItem,
    LineItemDraft,
    ValidationMode,
    iter_line_items,
)
from quotebuilder.exceptions import CategoryNotFoundError, LineItemNotFoundError
from quotebuilder.infrastructure.logger import QuotationOperation
from quotebuilder.services.id_generator import (
    CATEGORY_PREFIX,
    LINE_ITEM_PREFIX,
    generate_id,
)
from quotebuilder.services.quotation_calculator import (
    DEFAULT_TAX_RATE,
    compute_summary,
    percent_to_rate,
    recalculate_category,
)
from quotebuilder.services.validation import (
    parse_number,
    validate_line_item,
    validate_summary_inputs,
)


class QuotationDraftViewModel:
    """Pure-Python owner of the charge categories being edited on a quotation.

    Categories and line items are immutable values; every mutation swaps in a
    rebuilt category so subtotals and the financial summary are never stale.
    """

    def __init__(
        self,
        *,
        tax_rate: Any = DEFAULT_TAX_RATE,
        other_charges: Any = 0,
        validation_mode: ValidationMode = ValidationMode.PERMISSIVE,
        currency: Currency = Currency.PHP,
        id_factory: Callable[[str], str] = generate_id,
        logger: logging.Logger | None = None,
    ) -> None:
        self._categories: list[ChargeCategory] = []
        self.validation_mode = validation_mode
        self.currency = currency
        self._id_factory = id_factory
        self._logger = logger or logging.getLogger(__name__)
        self.tax_rate, self.other_charges = validate_summary_inputs(
            tax_rate, other_charges, validation_mode
        )

    @classmethod
    def from_settings(cls, settings_service, **kwargs) -> "QuotationDraftViewModel":
        """Create a draft seeded with the configured tax rate, other charges and mode."""
        return cls(
            tax_rate=settings_service.load_tax_rate(),
            other_charges=settings_service.load_other_charges(),
            validation_mode=settings_service.load_validation_mode(),
            currency=settings_service.load_base_currency(),
            **kwargs,
        )

    # ------------------------------------------------------------------ #
    # Category management
    # ------------------------------------------------------------------ #
    def set_categories(self, categories: Iterable[ChargeCategory]) -> None:
        """Replace the categories with the provided iterable."""
        coerced = [self._coerce_category(category) for category in categories]
        for category in coerced:
            for item in category.line_items:
                validate_line_item(item.to_draft(), self.validation_mode)
        self._categories = [recalculate_category(category) for category in coerced]
        self._normalize_display_order()

    def categories(self) -> Sequence[ChargeCategory]:
        """Return an immutable view of the categories."""
        return tuple(self._categories)

    def get_category(self, category_id: str) -> ChargeCategory:
        return self._categories[self._category_index(category_id)]

    def add_category(self, name: str) -> ChargeCategory:
        with QuotationOperation(f"add category {name!r}", self._logger):
            category = ChargeCategory(
                id=self._new_category_id(),
                name=name.strip(),
                display_order=len(self._categories),
            )
            self._categories.append(category)
        return category

    def rename_category(self, category_id: str, name: str) -> ChargeCategory:
        with QuotationOperation(f"rename category {category_id}", self._logger):
            index = self._category_index(category_id)
            renamed = self._categories[index].with_name(name.strip())
            self._categories[index] = renamed
        return renamed

    def delete_category(self, category_id: str) -> None:
        """Remove a category together with all of its line items."""
        with QuotationOperation(f"delete category {category_id}", self._logger):
            del self._categories[self._category_index(category_id)]
            self._normalize_display_order()

    def move_category(self, category_id: str, new_index: int) -> None:
        """Move a category to a new position, clamping the index to the list bounds."""
        with QuotationOperation(f"move category {category_id}", self._logger):
            category = self._categories.pop(self._category_index(category_id))
            new_index = max(0, min(new_index, len(self._categories)))
            self._categories.insert(new_index, category)
            self._normalize_display_order()

    def clear(self) -> None:
        self._categories.clear()

    # ------------------------------------------------------------------ #
    # Line items
    # ------------------------------------------------------------------ #
    def add_line_item(self, category_id: str, draft: LineItemDraft) -> LineItem:
        with QuotationOperation(f"add line item to {category_id}", self._logger):
            index = self._category_index(category_id)
            validate_line_item(draft, self.validation_mode)
            item = draft.to_line_item(self._new_line_item_id())
            category = self._categories[index]
            self._replace_category(index, category.line_items + (item,))
        return item

    def add_blank_line_item(self, category_id: str) -> LineItem:
        """Append an empty, untaxed row priced in the draft's currency."""
        return self.add_line_item(category_id, LineItemDraft(currency=self.currency))

    def update_line_item(
        self, category_id: str, item_id: str, draft: LineItemDraft
    ) -> LineItem:
        with QuotationOperation(f"update line item {item_id}", self._logger):
            index = self._category_index(category_id)
            category = self._categories[index]
            if category.find_line_item(item_id) is None:
                raise LineItemNotFoundError(
                    f"Line item {item_id!r} not found in category {category_id!r}"
                )
            validate_line_item(draft, self.validation_mode)
            updated = draft.to_line_item(item_id)
            self._replace_category(
                index,
                (updated if item.id == item_id else item for item in category.line_items),
            )
        return updated

    def delete_line_item(self, category_id: str, item_id: str) -> None:
        with QuotationOperation(f"delete line item {item_id}", self._logger):
            index = self._category_index(category_id)
            category = self._categories[index]
            if category.find_line_item(item_id) is None:
                raise LineItemNotFoundError(
                    f"Line item {item_id!r} not found in category {category_id!r}"
                )
            self._replace_category(
                index, (item for item in category.line_items if item.id != item_id)
            )

    def line_item_count(self) -> int:
        return sum(1 for _ in iter_line_items(self._categories))

    # ------------------------------------------------------------------ #
    # Summary inputs and derived values
    # ------------------------------------------------------------------ #
    def set_summary_inputs(
        self,
        *,
        tax_rate: Any | None = None,
        tax_percent: Any | None = None,
        other_charges: Any | None = None,
    ) -> None:
        """Update the tax rate (as a fraction or a percent) and other charges."""
        if tax_rate is not None and tax_percent is not None:
            raise ValueError("Pass either tax_rate or tax_percent, not both")
        rate = self.tax_rate
        if tax_rate is not None:
            rate = tax_rate
        elif tax_percent is not None:
            rate = percent_to_rate(parse_number(tax_percent, "tax_percent"))
        other = self.other_charges if other_charges is None else other_charges
        self.tax_rate, self.other_charges = validate_summary_inputs(
            rate, other, self.validation_mode
        )

    def set_validation_mode(self, mode: ValidationMode) -> None:
        self.validation_mode = mode

    def category_subtotals(self) -> dict[str, Decimal]:
        return {category.id: category.subtotal for category in self._categories}

    def compute_summary(self) -> FinancialSummary:
        """Compute the financial summary from the current snapshot."""
        return compute_summary(
            tuple(self._categories),
            tax_rate=self.tax_rate,
            other_charges=self.other_charges,
        )

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def _coerce_category(category: ChargeCategory) -> ChargeCategory:
        if isinstance(category, ChargeCategory):
            return category
        raise TypeError(f"Unsupported category type: {type(category)!r}")

    def _category_index(self, category_id: str) -> int:
        for index, category in enumerate(self._categories):
            if category.id == category_id:
                return index
        raise CategoryNotFoundError(f"Category {category_id!r} not found")

    def _replace_category(self, index: int, line_items: Iterable[LineItem]) -> None:
        category = self._categories[index].with_line_items(line_items)
        self._categories[index] = recalculate_category(category)
        self._logger.debug(
            "Category %s now has %d item(s), subtotal %s",
            category.id,
            len(category.line_items),
            category.subtotal,
        )

    def _new_category_id(self) -> str:
        return self._id_factory(CATEGORY_PREFIX)

    def _new_line_item_id(self) -> str:
        return self._id_factory(LINE_ITEM_PREFIX)

    def _normalize_display_order(self) -> None:
        for idx, category in enumerate(self._categories):
            if category.display_order != idx:
                self._categories[idx] = replace(category, display_order=idx)
