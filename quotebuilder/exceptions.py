"""Custom exception hierarchy for the quotation builder.

Calculation functions are total over numeric input and never raise; these
exceptions cover the validation boundary, draft mutations that reference
missing records, and configuration problems.
"""


class QuoteBuilderError(Exception):
    """Base exception for all quotation builder errors."""

    pass


# Validation-related exceptions
class ValidationError(QuoteBuilderError):
    """Base exception for validation errors."""

    pass


class LineItemValidationError(ValidationError):
    """Raised when line item data fails validation."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class QuotationValidationError(ValidationError):
    """Raised when quotation-level inputs (tax rate, other charges) are invalid."""

    pass


# Business logic exceptions
class BusinessLogicError(QuoteBuilderError):
    """Base exception for business logic violations."""

    pass


class CategoryNotFoundError(BusinessLogicError):
    """Raised when a charge category id is not present in the draft."""

    pass


class LineItemNotFoundError(BusinessLogicError):
    """Raised when a line item id is not present in its category."""

    pass


# Configuration exceptions
class ConfigurationError(QuoteBuilderError):
    """Base exception for configuration-related errors."""

    pass


class SettingsError(ConfigurationError):
    """Raised when a settings operation fails."""

    pass


class InvalidConfigurationError(ConfigurationError):
    """Raised when a configured value cannot be used."""

    pass
