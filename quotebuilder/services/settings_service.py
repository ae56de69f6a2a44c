"""Quotation defaults persisted through QSettings."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from PyQt5.QtCore import QSettings

from quotebuilder.domain.quotation_models import Currency, ValidationMode, to_decimal
from quotebuilder.exceptions import InvalidConfigurationError, SettingsError
from quotebuilder.infrastructure.app_constants import SETTINGS_APP, SETTINGS_ORG
from quotebuilder.services.quotation_calculator import DEFAULT_TAX_RATE
from quotebuilder.services.service_templates import DEFAULT_USD_FOREX_RATE

DEFAULT_FOREX_RATES = {
    Currency.USD: DEFAULT_USD_FOREX_RATE,
    Currency.PHP: Decimal("1"),
    Currency.EUR: Decimal("1"),
    Currency.CNY: Decimal("1"),
}


class SettingsService:
    def __init__(self, settings: QSettings | None = None, logger: logging.Logger | None = None) -> None:
        self._settings = settings if settings is not None else QSettings(SETTINGS_ORG, SETTINGS_APP)
        self._logger = logger or logging.getLogger(__name__)

    # --- Tax / other charges ------------------------------------------
    def load_tax_rate(self) -> Decimal:
        """Return the tax rate as a fraction (0.12 for 12%)."""
        return self._load_decimal("quotation/tax_rate", DEFAULT_TAX_RATE)

    def save_tax_rate(self, rate: Any) -> None:
        value = self._require_decimal("quotation/tax_rate", rate)
        if value < 0 or value > 1:
            raise InvalidConfigurationError(
                f"Tax rate must be stored as a fraction between 0 and 1, got {value}"
            )
        self.set("quotation/tax_rate", str(value))

    def save_tax_percent(self, percent: Any) -> None:
        """Store a tax rate typed as a percentage (12 -> 0.12)."""
        self.save_tax_rate(self._require_decimal("quotation/tax_rate", percent) / Decimal(100))

    def load_other_charges(self) -> Decimal:
        return self._load_decimal("quotation/other_charges", Decimal("0"))

    def save_other_charges(self, amount: Any) -> None:
        self.set("quotation/other_charges", str(self._require_decimal("quotation/other_charges", amount)))

    # --- Validation / currency ----------------------------------------
    def load_validation_mode(self) -> ValidationMode:
        raw = self._settings.value("quotation/validation_mode", ValidationMode.PERMISSIVE.value, type=str)
        return ValidationMode.from_label(raw)

    def save_validation_mode(self, mode: ValidationMode) -> None:
        self.set("quotation/validation_mode", mode.value)

    def load_base_currency(self) -> Currency:
        raw = self._settings.value("quotation/base_currency", Currency.PHP.value, type=str)
        try:
            return Currency.from_code(raw)
        except ValueError:
            self._logger.warning("Ignoring unsupported base currency %r in settings", raw)
            return Currency.PHP

    def load_forex_rate(self, currency: Currency) -> Decimal:
        default = DEFAULT_FOREX_RATES[currency]
        if currency is self.load_base_currency():
            return Decimal("1")
        rate = self._load_decimal(f"forex/{currency.value}", default)
        if rate <= 0:
            self._logger.warning("Non-positive forex rate for %s in settings; using %s", currency.value, default)
            return default
        return rate

    def save_forex_rate(self, currency: Currency, rate: Any) -> None:
        value = self._require_decimal(f"forex/{currency.value}", rate)
        if value <= 0:
            raise InvalidConfigurationError(f"Forex rate for {currency.value} must be positive")
        self.set(f"forex/{currency.value}", str(value))

    def forex_rates(self) -> dict[Currency, Decimal]:
        return {currency: self.load_forex_rate(currency) for currency in Currency}

    # --- Convenience ---------------------------------------------------
    def get(self, key: str, default=None, *, type=None):
        if type is None:
            return self._settings.value(key, defaultValue=default)
        return self._settings.value(key, defaultValue=default, type=type)

    def set(self, key: str, value) -> None:
        self._settings.setValue(key, value)
        self._settings.sync()
        if self._settings.status() != QSettings.NoError:
            raise SettingsError(f"Could not write setting {key}")

    def raw(self) -> QSettings:
        return self._settings

    # --- Internal helpers ---------------------------------------------
    def _load_decimal(self, key: str, default: Decimal) -> Decimal:
        raw = self._settings.value(key, defaultValue=str(default))
        try:
            value = to_decimal(raw)
        except (TypeError, ValueError):
            self._logger.warning("Invalid value %r for %s; using default %s", raw, key, default)
            return default
        if not value.is_finite():
            self._logger.warning("Non-finite value for %s; using default %s", key, default)
            return default
        return value

    @staticmethod
    def _require_decimal(key: str, value: Any) -> Decimal:
        try:
            parsed = to_decimal(value)
        except (TypeError, ValueError) as exc:
            raise InvalidConfigurationError(f"{key} must be numeric, got {value!r}") from exc
        if not parsed.is_finite():
            raise InvalidConfigurationError(f"{key} must be finite")
        return parsed
