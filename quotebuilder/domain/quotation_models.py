"""Domain models supporting quotation calculations."""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping

from quotebuilder.exceptions import LineItemValidationError

ZERO = Decimal("0")
ONE = Decimal("1")


def to_decimal(value: Any) -> Decimal:
    """Coerce incoming numbers to Decimal; floats go through ``str`` to keep 0.1 as 0.1."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not a monetary value")
    if value is None or (isinstance(value, str) and not value.strip()):
        return ZERO
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Not a number: {value!r}") from exc


@contextmanager
def nan_on_invalid():
    """Decimal context where inf - inf, inf * 0 and NaN comparisons yield NaN instead of raising.

    Only arithmetic belongs inside it; string parsing would also turn into NaN.
    """
    with localcontext() as ctx:
        ctx.traps[InvalidOperation] = False
        yield ctx


def _coerce_amount_fields(instance: Any) -> None:
    for name in ("price", "quantity", "forex_rate"):
        object.__setattr__(instance, name, to_decimal(getattr(instance, name)))


def _parse_field(value: Any, field_name: str) -> Decimal:
    try:
        return to_decimal(value)
    except (TypeError, ValueError) as exc:
        raise LineItemValidationError(
            f"{field_name} must be a number, got {value!r}", field=field_name
        ) from exc


def normalize_category_name(name: str | None) -> str:
    """Lowercase and collapse whitespace so "Origin Charges" matches " origin  charges"."""
    return " ".join((name or "").split()).lower()


class Currency(Enum):
    """Currencies a line item price may be denominated in."""

    USD = "USD"
    PHP = "PHP"
    EUR = "EUR"
    CNY = "CNY"

    @classmethod
    def from_code(cls, value: str | None) -> "Currency":
        """Map a stored or typed code to the enum, defaulting to the base currency."""
        normalized = (value or "").strip().upper()
        if not normalized:
            return cls.PHP
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unsupported currency code: {value!r}") from None

    def is_base(self) -> bool:
        return self is Currency.PHP


class ValidationMode(Enum):
    """How strictly line item and quotation inputs are checked."""

    PERMISSIVE = "permissive"
    STRICT = "strict"

    @classmethod
    def from_label(cls, value: str | None) -> "ValidationMode":
        normalized = (value or "").strip().lower()
        if normalized == cls.STRICT.value:
            return cls.STRICT
        return cls.PERMISSIVE


class ServiceType(Enum):
    """Services an inquiry can request; each seeds its own charge categories."""

    BROKERAGE = "Brokerage"
    FORWARDING = "Forwarding"
    TRUCKING = "Trucking"
    MARINE_INSURANCE = "Marine Insurance"
    OTHERS = "Others"


@dataclass(frozen=True)
class LineItemDraft:
    """User-entered values for a line item before it has an id or an amount."""

    description: str = ""
    price: Decimal = ZERO
    currency: Currency = Currency.PHP
    quantity: Decimal = ONE
    forex_rate: Decimal = ONE
    is_taxed: bool = False
    remarks: str = ""
    unit: str = ""

    def __post_init__(self) -> None:
        _coerce_amount_fields(self)

    @classmethod
    def from_values(
        cls,
        *,
        description: str = "",
        price: Any = 0,
        currency: Currency | str | None = None,
        quantity: Any = 1,
        forex_rate: Any = 1,
        is_taxed: bool = False,
        remarks: str = "",
        unit: str = "",
    ) -> "LineItemDraft":
        """Build a draft from loosely typed form values.

        Raises ``LineItemValidationError`` naming the offending field when a
        value cannot be read as a number or currency code.
        """
        if not isinstance(currency, Currency):
            try:
                currency = Currency.from_code(currency)
            except ValueError as exc:
                raise LineItemValidationError(str(exc), field="currency") from exc
        return cls(
            description=description or "",
            price=_parse_field(price, "price"),
            currency=currency,
            quantity=_parse_field(quantity, "quantity"),
            forex_rate=_parse_field(forex_rate, "forex_rate"),
            is_taxed=bool(is_taxed),
            remarks=remarks or "",
            unit=unit or "",
        )

    def to_line_item(self, item_id: str) -> "LineItem":
        return LineItem(
            id=item_id,
            description=self.description,
            price=self.price,
            currency=self.currency,
            quantity=self.quantity,
            forex_rate=self.forex_rate,
            is_taxed=self.is_taxed,
            remarks=self.remarks,
            unit=self.unit,
        )


@dataclass(frozen=True)
class LineItem:
    """A single charge row within a charge category."""

    id: str
    description: str = ""
    price: Decimal = ZERO
    currency: Currency = Currency.PHP
    quantity: Decimal = ONE
    forex_rate: Decimal = ONE
    is_taxed: bool = False
    remarks: str = ""
    unit: str = ""

    def __post_init__(self) -> None:
        # Plain ints and floats are accepted and stored as Decimal
        _coerce_amount_fields(self)

    @property
    def amount(self) -> Decimal:
        """Amount in the base currency, always derived from price, quantity and forex."""
        with nan_on_invalid():
            return self.price * self.quantity * self.forex_rate

    def to_draft(self) -> LineItemDraft:
        return LineItemDraft(
            description=self.description,
            price=self.price,
            currency=self.currency,
            quantity=self.quantity,
            forex_rate=self.forex_rate,
            is_taxed=self.is_taxed,
            remarks=self.remarks,
            unit=self.unit,
        )


@dataclass(frozen=True)
class ChargeCategory:
    """A named group of line items, e.g. "SEA FREIGHT" or "BROKERAGE CHARGES"."""

    id: str
    name: str
    line_items: tuple[LineItem, ...] = ()
    display_order: int = 0

    def __post_init__(self) -> None:
        # Accept any iterable but store an immutable tuple
        object.__setattr__(self, "line_items", tuple(self.line_items))

    @property
    def subtotal(self) -> Decimal:
        with nan_on_invalid():
            return sum((item.amount for item in self.line_items), ZERO)

    def normalized_name(self) -> str:
        return normalize_category_name(self.name)

    def find_line_item(self, item_id: str) -> LineItem | None:
        for item in self.line_items:
            if item.id == item_id:
                return item
        return None

    def with_line_items(self, line_items: Iterable[LineItem]) -> "ChargeCategory":
        """Return a copy holding a different set of line items."""
        return replace(self, line_items=tuple(line_items))

    def with_name(self, name: str) -> "ChargeCategory":
        return replace(self, name=name)


@dataclass(frozen=True)
class FinancialSummary:
    """Taxed/non-taxed breakdown and grand total for a quotation."""

    subtotal_non_taxed: Decimal = ZERO
    subtotal_taxed: Decimal = ZERO
    tax_rate: Decimal = ZERO
    tax_amount: Decimal = ZERO
    other_charges: Decimal = ZERO
    grand_total: Decimal = ZERO

    def as_dict(self) -> dict[str, Decimal]:
        return {
            "subtotal_non_taxed": self.subtotal_non_taxed,
            "subtotal_taxed": self.subtotal_taxed,
            "tax_rate": self.tax_rate,
            "tax_amount": self.tax_amount,
            "other_charges": self.other_charges,
            "grand_total": self.grand_total,
        }


@dataclass(frozen=True)
class MarkupBreakdown:
    """Selling price derived from a vendor cost plus a markup."""

    base_cost: Decimal = ZERO
    amount_added: Decimal = ZERO
    percentage_added: Decimal = ZERO

    @property
    def final_price(self) -> Decimal:
        return self.base_cost + self.amount_added


@dataclass(frozen=True)
class MergeResult:
    """Outcome of merging line items into a category by name."""

    merged: bool
    category_id: str
    items_added: int
    previous_item_count: int
    new_item_count: int


@dataclass(frozen=True)
class InquiryService:
    """A service requested on an inquiry, with free-form details."""

    service_type: ServiceType
    details: Mapping[str, Any] = field(default_factory=dict)


def iter_line_items(categories: Iterable[ChargeCategory]) -> Iterator[LineItem]:
    """Yield every line item across all categories, in order."""
    for category in categories:
        yield from category.line_items

