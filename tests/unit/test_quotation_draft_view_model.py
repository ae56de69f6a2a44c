import logging
from decimal import Decimal

import pytest

from quotebuilder.domain.quotation_models import Currency, LineItemDraft, ValidationMode
from quotebuilder.exceptions import (
    CategoryNotFoundError,
    LineItemNotFoundError,
    LineItemValidationError,
    QuotationValidationError,
    ValidationError,
)
from quotebuilder.services.category_merge import merge_into
from quotebuilder.view_models import QuotationDraftViewModel
from tests.factories import category, line_item, line_item_draft


def _sequential_ids():
    counter = {"n": 0}

    def _factory(prefix):
        counter["n"] += 1
        return f"{prefix}-{counter['n']}"

    return _factory


@pytest.fixture
def view_model():
    return QuotationDraftViewModel(id_factory=_sequential_ids())


def test_add_category_and_line_items_refresh_subtotal(view_model):
    forwarding = view_model.add_category("  Forwarding ")
    assert forwarding.name == "Forwarding"
    assert forwarding.id == "cat-1"

    view_model.add_line_item(forwarding.id, line_item_draft(price=100, quantity=2))
    view_model.add_line_item(forwarding.id, line_item_draft(price=100, quantity=3, forex_rate="58.0", currency="USD"))

    refreshed = view_model.get_category(forwarding.id)
    assert len(refreshed.line_items) == 2
    assert refreshed.subtotal == Decimal("17600")
    assert view_model.category_subtotals() == {forwarding.id: Decimal("17600")}


def test_update_line_item_recomputes_amount_and_subtotal(view_model):
    cat = view_model.add_category("Brokerage")
    item = view_model.add_line_item(cat.id, line_item_draft(price=1000, is_taxed=True))

    updated = view_model.update_line_item(cat.id, item.id, line_item_draft(price=1500, quantity=2, is_taxed=True))

    assert updated.id == item.id
    assert updated.amount == Decimal("3000")
    assert view_model.get_category(cat.id).subtotal == Decimal("3000")


def test_delete_line_item_refreshes_subtotal(view_model):
    cat = view_model.add_category("Trucking")
    keep = view_model.add_line_item(cat.id, line_item_draft(price=5000))
    drop = view_model.add_line_item(cat.id, line_item_draft(price=700))

    view_model.delete_line_item(cat.id, drop.id)

    remaining = view_model.get_category(cat.id)
    assert [item.id for item in remaining.line_items] == [keep.id]
    assert remaining.subtotal == Decimal("5000")


def test_add_blank_line_item_uses_draft_currency():
    view_model = QuotationDraftViewModel(currency=Currency.USD)
    cat = view_model.add_category("Air Freight")

    blank = view_model.add_blank_line_item(cat.id)

    assert blank.currency is Currency.USD
    assert blank.amount == 0
    assert blank.is_taxed is False
    assert blank.quantity == 1


def test_compute_summary_uses_current_inputs(view_model):
    brokerage = view_model.add_category("Brokerage")
    forwarding = view_model.add_category("Forwarding")
    view_model.add_line_item(brokerage.id, line_item_draft(price=1000, is_taxed=True))
    view_model.add_line_item(forwarding.id, line_item_draft(price=500, quantity=2))

    summary = view_model.compute_summary()
    assert summary.grand_total == Decimal("2120")

    view_model.set_summary_inputs(tax_percent=10, other_charges=250)
    summary = view_model.compute_summary()
    assert summary.tax_rate == Decimal("0.1")
    assert summary.tax_amount == Decimal("100")
    assert summary.grand_total == Decimal("2350")

    view_model.set_summary_inputs(tax_rate="0.12")
    assert view_model.other_charges == Decimal("250")
    assert view_model.compute_summary().grand_total == Decimal("2370")


def test_set_summary_inputs_rejects_rate_and_percent_together(view_model):
    with pytest.raises(ValueError):
        view_model.set_summary_inputs(tax_rate="0.12", tax_percent=12)


def test_unknown_ids_raise(view_model):
    cat = view_model.add_category("Others")

    with pytest.raises(CategoryNotFoundError):
        view_model.add_line_item("cat-missing", line_item_draft())
    with pytest.raises(LineItemNotFoundError):
        view_model.update_line_item(cat.id, "line-missing", line_item_draft())
    with pytest.raises(LineItemNotFoundError):
        view_model.delete_line_item(cat.id, "line-missing")


def test_rejected_operations_are_logged_as_warnings(view_model, caplog):
    with caplog.at_level(logging.WARNING):
        with pytest.raises(CategoryNotFoundError):
            view_model.delete_category("cat-missing")

    assert any("Rejected delete category" in record.message for record in caplog.records)


def test_strict_mode_blocks_invalid_line_items_without_mutating():
    view_model = QuotationDraftViewModel(validation_mode=ValidationMode.STRICT)
    cat = view_model.add_category("Forwarding")

    with pytest.raises(LineItemValidationError):
        view_model.add_line_item(cat.id, line_item_draft(price=-1))

    assert view_model.get_category(cat.id).line_items == ()


def test_permissive_mode_accepts_negative_prices(view_model):
    cat = view_model.add_category("Adjustments")
    view_model.add_line_item(cat.id, line_item_draft(price=-250))

    assert view_model.compute_summary().grand_total == Decimal("-250")


def test_strict_mode_rejects_out_of_range_tax_rate():
    with pytest.raises(QuotationValidationError):
        QuotationDraftViewModel(tax_rate=12, validation_mode=ValidationMode.STRICT)


def test_rename_move_and_delete_category_keep_display_order(view_model):
    first = view_model.add_category("Origin")
    second = view_model.add_category("Freight")
    third = view_model.add_category("Destination")

    view_model.rename_category(first.id, "Origin Local Charges")
    view_model.move_category(third.id, 0)

    names = [c.name for c in view_model.categories()]
    assert names == ["Destination", "Origin Local Charges", "Freight"]
    assert [c.display_order for c in view_model.categories()] == [0, 1, 2]

    view_model.delete_category(first.id)
    assert [c.id for c in view_model.categories()] == [third.id, second.id]
    assert [c.display_order for c in view_model.categories()] == [0, 1]


def test_set_categories_validates_and_normalizes(view_model):
    items = [line_item(price=10), line_item(price=20, is_taxed=True)]
    view_model.set_categories([category("B", items, display_order=5), category("A")])

    cats = view_model.categories()
    assert [c.display_order for c in cats] == [0, 1]
    assert view_model.line_item_count() == 2
    assert view_model.compute_summary().subtotal_taxed == Decimal("20")

    with pytest.raises(TypeError):
        view_model.set_categories([{"name": "not a category"}])


def test_from_settings_seeds_defaults():
    class _Settings:
        def load_tax_rate(self):
            return Decimal("0.10")

        def load_other_charges(self):
            return Decimal("150")

        def load_validation_mode(self):
            return ValidationMode.STRICT

        def load_base_currency(self):
            return Currency.PHP

    view_model = QuotationDraftViewModel.from_settings(_Settings())

    assert view_model.tax_rate == Decimal("0.10")
    assert view_model.other_charges == Decimal("150")
    assert view_model.validation_mode is ValidationMode.STRICT
    assert view_model.compute_summary().grand_total == Decimal("150")


def test_categories_returns_snapshot(view_model):
    view_model.add_category("Forwarding")
    snapshot = view_model.categories()
    view_model.add_category("Brokerage")

    assert len(snapshot) == 1
    assert len(view_model.categories()) == 2
    view_model.clear()
    assert view_model.categories() == ()


def test_update_line_item_accepts_draft_from_existing_item(view_model):
    cat = view_model.add_category("Forwarding")
    item = view_model.add_line_item(cat.id, LineItemDraft.from_values(description="O/F", price=40, currency="USD", forex_rate="56.25"))

    view_model.update_line_item(cat.id, item.id, item.to_draft())

    assert view_model.get_category(cat.id).subtotal == Decimal("2250")


def test_non_numeric_tax_percent_is_a_validation_error(view_model):
    with pytest.raises(ValidationError):
        view_model.set_summary_inputs(tax_percent="twelve")

    assert view_model.tax_rate == Decimal("0.12")


def test_shared_id_factory_works_for_merge_and_view_model():
    factory = _sequential_ids()
    view_model = QuotationDraftViewModel(id_factory=factory)

    first = view_model.add_category("Brokerage")
    merged, result = merge_into(view_model.categories(), "Trucking", [], id_factory=factory)

    assert first.id == "cat-1"
    assert result.category_id == "cat-2"
    assert [c.id for c in merged] == ["cat-1", "cat-2"]
