"""Starter charge categories generated from the services on an inquiry.

Every generated line is zero-priced; pricing fills in the numbers. Categories
produced by different services under the same name are merged.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any, Callable, Iterable, Mapping

from quotebuilder.domain.quotation_models import (
    ChargeCategory,
    Currency,
    InquiryService,
    LineItem,
    ServiceType,
    to_decimal,
)
from quotebuilder.services.category_merge import merge_categories
from quotebuilder.services.id_generator import generate_category_id, generate_line_item_id

logger = logging.getLogger(__name__)

DEFAULT_USD_FOREX_RATE = Decimal("56.25")

_COLD_CHAIN_KEYWORDS = ("temperature", "pharmaceutical", "perishable")


class _TemplateContext:
    def __init__(self, details: Mapping[str, Any], usd_forex_rate: Decimal) -> None:
        self.details = details or {}
        self.usd_forex_rate = usd_forex_rate

    def get(self, key: str, default: str = "") -> str:
        value = self.details.get(key)
        return str(value) if value else default

    @property
    def commodity(self) -> str:
        return self.get("commodity").lower()

    def is_cold_chain(self) -> bool:
        return any(word in self.commodity for word in _COLD_CHAIN_KEYWORDS)


def _line(
    description: str,
    remarks: str,
    *,
    is_taxed: bool = True,
    currency: Currency = Currency.PHP,
    forex_rate: Decimal = Decimal("1"),
) -> LineItem:
    return LineItem(
        id=generate_line_item_id(),
        description=description,
        price=Decimal("0"),
        currency=currency,
        quantity=Decimal("1"),
        forex_rate=forex_rate,
        is_taxed=is_taxed,
        remarks=remarks,
    )


def _category(name: str, items: Iterable[LineItem]) -> ChargeCategory:
    return ChargeCategory(id=generate_category_id(), name=name, line_items=tuple(items))


def _brokerage(ctx: _TemplateContext) -> list[ChargeCategory]:
    brokerage = [
        _line("Customs Brokerage Fee", "Per Entry"),
        _line("Entry Processing", "Per Entry"),
        _line("Documentation Fee", "Per Entry"),
    ]
    if "pharmaceutical" in ctx.commodity:
        brokerage.append(_line("FDA Permit Processing", "Per Entry"))

    destination = [
        _line("Arrastre", "Per Shipment"),
        _line("Wharfage", "Per Shipment"),
    ]
    if ctx.get("delivery_address"):
        destination.append(_line("Delivery to Address", "Per Shipment"))

    return [
        _category("BROKERAGE CHARGES", brokerage),
        _category("DESTINATION LOCAL CHARGES", destination),
    ]


def _forwarding(ctx: _TemplateContext) -> list[ChargeCategory]:
    mode = ctx.get("mode", "Ocean")
    if mode == "Air":
        freight_name, description, unit = "AIR FREIGHT", "Air Freight", "Per KG"
    elif mode == "Land":
        freight_name, description, unit = "LAND FREIGHT", "Land Freight", "Per Shipment"
    else:
        freight_name, description, unit = "SEA FREIGHT", "Ocean Freight", "Per Container"

    if mode == "Air" and (
        "pharmaceutical" in ctx.commodity or ctx.get("cargo_type") == "Perishable"
    ):
        description += " - Express Service"

    freight = _line(
        description,
        unit,
        is_taxed=False,
        currency=Currency.USD,
        forex_rate=ctx.usd_forex_rate,
    )

    pol = ctx.get("pol", "Origin")
    origin = [
        _line(f"Port Handling - {pol}", "Per Shipment"),
        _line("Documentation Fee", "Per Shipment"),
    ]
    if mode == "Ocean":
        origin.append(_line("VGM (Verified Gross Mass)", "Per Container"))
    if ctx.is_cold_chain():
        origin.append(_line(f"Cold Storage Handling - {pol}", "Per Shipment"))

    pod = ctx.get("pod", "Destination")
    destination = [_line(f"Port Handling - {pod}", "Per Shipment")]
    if ctx.is_cold_chain():
        destination.append(_line(f"Cold Storage Handling - {pod}", "Per Shipment"))

    return [
        _category(freight_name, [freight]),
        _category("ORIGIN LOCAL CHARGES", origin),
        _category("DESTINATION LOCAL CHARGES", destination),
    ]


def _trucking(ctx: _TemplateContext) -> list[ChargeCategory]:
    truck_type = ctx.get("truck_type", "Closed Van")
    return [
        _category(
            "DESTINATION LOCAL CHARGES", [_line(f"Trucking - {truck_type}", "Per Trip")]
        )
    ]


def _marine_insurance(ctx: _TemplateContext) -> list[ChargeCategory]:
    return [
        _category(
            "OTHER CHARGES",
            [_line("Marine Insurance Premium", "Per Shipment", is_taxed=False)],
        )
    ]


def _others(ctx: _TemplateContext) -> list[ChargeCategory]:
    description = ctx.get("service_description", "Additional Service")
    return [_category("OTHER CHARGES", [_line(description, "Per Service")])]


_GENERATORS: dict[ServiceType, Callable[[_TemplateContext], list[ChargeCategory]]] = {
    ServiceType.BROKERAGE: _brokerage,
    ServiceType.FORWARDING: _forwarding,
    ServiceType.TRUCKING: _trucking,
    ServiceType.MARINE_INSURANCE: _marine_insurance,
    ServiceType.OTHERS: _others,
}


def generate_charge_categories(
    services: Iterable[InquiryService],
    *,
    usd_forex_rate: Any = DEFAULT_USD_FOREX_RATE,
) -> list[ChargeCategory]:
    """Build merged starter categories for the requested services."""
    rate = to_decimal(usd_forex_rate)
    generated: list[ChargeCategory] = []
    for service in services:
        generator = _GENERATORS.get(service.service_type)
        if generator is None:
            logger.warning("No charge template for service %r", service.service_type)
            continue
        generated.extend(generator(_TemplateContext(service.details, rate)))

    return [
        replace(category, display_order=index)
        for index, category in enumerate(merge_categories(generated))
    ]
