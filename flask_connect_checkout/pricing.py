"""Product tiers and the country price adjustment.

This module is the only place the multiplier table lives.  The checkout
endpoint charges :func:`adjust_price` and the console renders previews from
the very same function, so an estimate can never disagree with the charge::

    >>> adjust_price(1500, "CA")
    1950
    >>> adjust_price(3000, "MX")
    60000
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Iterable, Mapping

from flask_connect_checkout.exceptions import MissingPriceError, UnknownTierError, UnsupportedCountryError

#: Multiplier applied to the base price, keyed by account country.
COUNTRY_MULTIPLIERS: Mapping[str, Decimal] = MappingProxyType(
    {
        "US": Decimal("1"),
        "CA": Decimal("1.3"),
        "MX": Decimal("20"),
    }
)

#: Fallback currency for accounts without a ``default_currency``.
COUNTRY_CURRENCIES: Mapping[str, str] = MappingProxyType({"US": "usd", "CA": "cad", "MX": "mxn"})

SUPPORTED_COUNTRIES: frozenset[str] = frozenset(COUNTRY_MULTIPLIERS)

DEFAULT_TIER_KEY = "standard"


@dataclass(frozen=True)
class ProductTier:
    """A sellable option with a base price per currency in minor units."""

    key: str
    label: str
    description: str
    base_prices: Mapping[str, int] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_prices", MappingProxyType(dict(self.base_prices)))

    def base_price(self, currency: str) -> int | None:
        return self.base_prices.get(currency.lower())


@dataclass(frozen=True)
class Quote:
    """A tier priced for one country/currency pair."""

    tier: ProductTier
    country: str
    currency: str
    base_amount: int
    amount: int

    @property
    def display(self) -> str:
        return format_amount(self.amount, self.currency)

    def to_dict(self) -> dict:
        return {
            "key": self.tier.key,
            "label": self.tier.label,
            "description": self.tier.description,
            "country": self.country,
            "currency": self.currency,
            "base_amount": self.base_amount,
            "amount": self.amount,
            "display": self.display,
        }


DEFAULT_TIERS: tuple[ProductTier, ...] = (
    ProductTier(
        key="standard",
        label="Standard",
        description="Open-air, general area",
        base_prices={"usd": 1500, "cad": 1500, "mxn": 1500},
    ),
    ProductTier(
        key="covered",
        label="Covered",
        description="Covered spot near main gate",
        base_prices={"usd": 2000, "cad": 2000, "mxn": 2000},
    ),
    ProductTier(
        key="vip",
        label="VIP",
        description="VIP row, closest to entrance",
        base_prices={"usd": 3000, "cad": 3000, "mxn": 3000},
    ),
)


def adjust_price(base_minor_units: int, country: str) -> int:
    """Return the charged amount for *base_minor_units* in *country*.

    ``US`` is unchanged, ``CA`` is ``x1.3`` rounded half-up and ``MX`` is
    ``x20``.

    Raises:
        UnsupportedCountryError: If *country* is not in
            :data:`SUPPORTED_COUNTRIES`.
    """
    multiplier = COUNTRY_MULTIPLIERS.get(country)
    if multiplier is None:
        raise UnsupportedCountryError(country)
    adjusted = Decimal(base_minor_units) * multiplier
    return int(adjusted.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def currency_for(country: str | None, default_currency: str | None = None) -> str | None:
    """Resolve the charge currency for an account.

    Sources are tried in order: the account's own ``default_currency``, then
    the :data:`COUNTRY_CURRENCIES` table.
    """
    for candidate in (default_currency, COUNTRY_CURRENCIES.get(country or "")):
        if candidate:
            return candidate.lower()
    return None


def get_tier(key: str | None, tiers: Iterable[ProductTier] = DEFAULT_TIERS) -> ProductTier:
    """Look up a tier by (case-insensitive) key, defaulting to ``standard``."""
    tiers = tuple(tiers)
    wanted = (key or DEFAULT_TIER_KEY).lower()
    for tier in tiers:
        if tier.key == wanted:
            return tier
    raise UnknownTierError(wanted, [t.key for t in tiers])


def quote(tier: ProductTier, country: str | None, currency: str | None) -> Quote:
    """Price *tier* for an account in *country* charging *currency*.

    Raises:
        UnsupportedCountryError: Country outside the allow-list or no
            currency could be resolved.
        MissingPriceError: The tier has no base price in *currency*.
    """
    if not currency or country not in SUPPORTED_COUNTRIES:
        raise UnsupportedCountryError(
            country,
            "Selected connected account is not in US/CA/MX "
            "or has no supported currency for this demo.",
        )
    base = tier.base_price(currency)
    if base is None:
        raise MissingPriceError(tier.label, currency)
    return Quote(
        tier=tier,
        country=country,
        currency=currency.lower(),
        base_amount=base,
        amount=adjust_price(base, country),
    )


def format_amount(minor_units: int, currency: str) -> str:
    """Format minor units for display, e.g. ``1950, "cad"`` -> ``"19.50 CAD"``."""
    major = (Decimal(minor_units) / 100).quantize(Decimal("0.01"))
    return f"{major} {currency.upper()}"
