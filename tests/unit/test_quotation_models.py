from decimal import Decimal

import pytest

from quotebuilder.domain.quotation_models import (
    ChargeCategory,
    Currency,
    LineItemDraft,
    ValidationMode,
    normalize_category_name,
    to_decimal,
)
from quotebuilder.exceptions import LineItemValidationError
from tests.factories import category, line_item


def test_to_decimal_coerces_common_inputs():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("  12.50 ") == Decimal("12.50")
    assert to_decimal(None) == Decimal("0")
    assert to_decimal("") == Decimal("0")
    assert to_decimal(Decimal("3")) == Decimal("3")


def test_to_decimal_rejects_garbage():
    with pytest.raises(ValueError):
        to_decimal("twelve")
    with pytest.raises(TypeError):
        to_decimal(True)


def test_currency_from_code():
    assert Currency.from_code("usd") is Currency.USD
    assert Currency.from_code(None) is Currency.PHP
    assert Currency.PHP.is_base()
    with pytest.raises(ValueError):
        Currency.from_code("GBP")


def test_validation_mode_from_label_defaults_to_permissive():
    assert ValidationMode.from_label("STRICT") is ValidationMode.STRICT
    assert ValidationMode.from_label("") is ValidationMode.PERMISSIVE
    assert ValidationMode.from_label("unknown") is ValidationMode.PERMISSIVE


def test_amount_is_derived_and_follows_field_changes():
    item = line_item(price=40, quantity="3.68", forex_rate="56.25", currency="USD")
    assert item.amount == Decimal("8280")

    repriced = LineItemDraft.from_values(price=50, quantity="3.68", forex_rate="56.25", currency="USD")
    assert repriced.to_line_item(item.id).amount == Decimal("10350")


def test_line_item_cannot_be_mutated():
    item = line_item()
    with pytest.raises(AttributeError):
        item.price = Decimal("1")


def test_draft_round_trips_through_line_item():
    draft = LineItemDraft.from_values(
        description="O/F", price="40.00", currency="USD", quantity="3.68",
        forex_rate="56.25", is_taxed=False, remarks="PER W/M", unit="W/M",
    )
    assert draft.to_line_item("line-1").to_draft() == draft


def test_category_subtotal_sums_amounts():
    cat = category("Brokerage", [line_item(price=100), line_item(price=50, quantity=2)])
    assert cat.subtotal == Decimal("200")
    assert ChargeCategory(id="c", name="Empty").subtotal == Decimal("0")


def test_category_stores_line_items_as_tuple():
    items = [line_item(price=1)]
    cat = ChargeCategory(id="c", name="List", line_items=items)
    items.append(line_item(price=2))

    assert isinstance(cat.line_items, tuple)
    assert cat.subtotal == Decimal("1")


def test_category_helpers():
    first = line_item(id="line-a")
    cat = category("  Origin   Charges ", [first])

    assert cat.normalized_name() == "origin charges"
    assert normalize_category_name(None) == ""
    assert cat.find_line_item("line-a") is first
    assert cat.find_line_item("missing") is None
    assert cat.with_name("Renamed").name == "Renamed"
    assert cat.with_line_items([]).subtotal == 0


def test_from_values_reports_unparsable_field():
    with pytest.raises(LineItemValidationError) as excinfo:
        LineItemDraft.from_values(price="abc")
    assert excinfo.value.field == "price"

    with pytest.raises(LineItemValidationError) as excinfo:
        LineItemDraft.from_values(currency="GBP")
    assert excinfo.value.field == "currency"


def test_draft_and_line_item_store_decimals():
    draft = LineItemDraft(price=40, quantity=2.5, forex_rate="56.25")
    assert (draft.price, draft.quantity, draft.forex_rate) == (
        Decimal("40"), Decimal("2.5"), Decimal("56.25"),
    )
    assert draft.to_line_item("line-1").amount == Decimal("5625")
