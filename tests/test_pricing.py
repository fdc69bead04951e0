"""Tests for the country price adjustment and tier lookup."""

import pytest

from flask_connect_checkout import pricing
from flask_connect_checkout.exceptions import MissingPriceError, UnknownTierError, UnsupportedCountryError


# ---------------------------------------------------------------------------
# adjust_price
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("base", [0, 1, 1500, 2000, 3000, 99999])
def test_us_price_unchanged(base):
    assert pricing.adjust_price(base, "US") == base


@pytest.mark.parametrize(
    "base, expected",
    [
        (1500, 1950),
        (2000, 2600),
        (3000, 3900),
        (1, 1),  # 1.3
        (2, 3),  # 2.6
        (5, 7),  # 6.5 rounds half-up
        (15, 20),  # 19.5 rounds half-up
        (7, 9),  # 9.1
    ],
)
def test_ca_price_rounds_half_up(base, expected):
    assert pricing.adjust_price(base, "CA") == expected


@pytest.mark.parametrize("base", [0, 1500, 2000, 3000, 12345])
def test_mx_price_times_twenty(base):
    assert pricing.adjust_price(base, "MX") == base * 20


def test_mx_vip_example():
    assert pricing.adjust_price(3000, "MX") == 60000


@pytest.mark.parametrize("country", ["DE", "GB", "", None, "us"])
def test_unsupported_country_raises(country):
    with pytest.raises(UnsupportedCountryError):
        pricing.adjust_price(1500, country)


def test_adjust_price_returns_int():
    assert isinstance(pricing.adjust_price(1500, "CA"), int)


# ---------------------------------------------------------------------------
# currency_for
# ---------------------------------------------------------------------------


def test_currency_prefers_account_default():
    assert pricing.currency_for("US", "CAD") == "cad"


@pytest.mark.parametrize("country, expected", [("US", "usd"), ("CA", "cad"), ("MX", "mxn")])
def test_currency_falls_back_to_country(country, expected):
    assert pricing.currency_for(country) == expected


def test_currency_unknown_country_without_default():
    assert pricing.currency_for("DE") is None
    assert pricing.currency_for(None) is None


# ---------------------------------------------------------------------------
# Tiers and quotes
# ---------------------------------------------------------------------------


def test_get_tier_case_insensitive():
    assert pricing.get_tier("VIP").key == "vip"


def test_get_tier_defaults_to_standard():
    assert pricing.get_tier(None).key == "standard"
    assert pricing.get_tier("").key == "standard"


def test_get_tier_unknown_lists_valid_keys():
    with pytest.raises(UnknownTierError) as exc_info:
        pricing.get_tier("platinum")
    assert "standard, covered, vip" in str(exc_info.value)


def test_quote_ca_standard():
    q = pricing.quote(pricing.get_tier("standard"), "CA", "cad")
    assert q.base_amount == 1500
    assert q.amount == 1950
    assert q.display == "19.50 CAD"


def test_quote_missing_currency_price():
    with pytest.raises(MissingPriceError) as exc_info:
        pricing.quote(pricing.get_tier("covered"), "US", "eur")
    assert "No base price for Covered in EUR" in str(exc_info.value)


def test_quote_unsupported_country():
    with pytest.raises(UnsupportedCountryError):
        pricing.quote(pricing.get_tier("standard"), "DE", "eur")


def test_quote_without_currency():
    with pytest.raises(UnsupportedCountryError):
        pricing.quote(pricing.get_tier("standard"), "US", None)


def test_product_tier_prices_are_read_only():
    tier = pricing.get_tier("standard")
    with pytest.raises(TypeError):
        tier.base_prices["usd"] = 1


def test_format_amount():
    assert pricing.format_amount(60000, "mxn") == "600.00 MXN"
    assert pricing.format_amount(5, "usd") == "0.05 USD"
