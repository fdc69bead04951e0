"""Exception hierarchy for flask-connect-checkout.

Views map :class:`ValidationError` to ``400`` and :class:`GatewayError` to
``500`` (``400`` for the read-only session status endpoint).
"""

from __future__ import annotations


class ConnectCheckoutError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(ConnectCheckoutError):
    """Required settings are missing; the app must not start."""


class ValidationError(ConnectCheckoutError):
    """The request cannot be served as given."""


class UnknownTierError(ValidationError):
    def __init__(self, key: str, valid: list[str]) -> None:
        super().__init__(f"Invalid spotOption. Valid: {', '.join(valid)}")
        self.key = key
        self.valid = valid


class UnsupportedCountryError(ValidationError):
    def __init__(self, country: str | None, message: str | None = None) -> None:
        super().__init__(message or f"Unsupported account country: {country!r}")
        self.country = country


class MissingPriceError(ValidationError):
    def __init__(self, label: str, currency: str) -> None:
        super().__init__(f"No base price for {label} in {currency.upper()}")
        self.label = label
        self.currency = currency


class GatewayError(ConnectCheckoutError):
    """The payments provider rejected or failed a call.

    ``user_message`` is the provider's own message when it sent one.
    """

    def __init__(self, message: str, *, user_message: str | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.user_message = user_message
        self.code = code
