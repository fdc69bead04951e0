"""Tests for the Stripe adapter (Stripe resource classes are patched)."""

from types import SimpleNamespace
from unittest import mock

import pytest
import stripe

from flask_connect_checkout.exceptions import GatewayError
from flask_connect_checkout.gateway import (
    StripeGateway,
    account_display_name,
    attr_path,
    serialize_account,
    serialize_customer,
)

from conftest import make_account


@pytest.fixture
def stripe_gateway():
    return StripeGateway("sk_test_abc")


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def test_attr_path_mixed_objects():
    obj = SimpleNamespace(settings={"dashboard": SimpleNamespace(display_name="Lot 7")})
    assert attr_path(obj, "settings", "dashboard", "display_name") == "Lot 7"
    assert attr_path(obj, "settings", "missing", "display_name") is None
    assert attr_path(None, "id") is None


@pytest.mark.parametrize(
    "kwargs, expected",
    [
        ({"name": "Biz", "display_name": "Dash", "email": "e@x.com"}, "Biz"),
        ({"display_name": "Dash", "email": "e@x.com"}, "Dash"),
        ({"email": "e@x.com"}, "e@x.com"),
        ({}, "acct_1"),
    ],
)
def test_account_display_name_precedence(kwargs, expected):
    assert account_display_name(make_account("acct_1", "US", **kwargs)) == expected


def test_serialize_account():
    account = make_account("acct_1", "CA", name="Garage", default_currency="")
    assert serialize_account(account) == {
        "id": "acct_1",
        "name": "Garage",
        "country": "CA",
        "default_currency": None,
        "capabilities": {"card_payments": "active", "transfers": "active"},
    }


def test_serialize_account_missing_capabilities():
    account = SimpleNamespace(id="acct_2", country="US")
    assert serialize_account(account)["capabilities"] == {}


def test_serialize_customer_blank_fields():
    assert serialize_customer(SimpleNamespace(id="cus_1", name="", email=None)) == {
        "id": "cus_1",
        "name": None,
        "email": None,
    }


# ---------------------------------------------------------------------------
# Provider calls
# ---------------------------------------------------------------------------


def test_list_customers(stripe_gateway):
    listing = SimpleNamespace(data=[SimpleNamespace(id="cus_1", name="Ann", email="ann@example.com")])
    with mock.patch.object(stripe.Customer, "list", return_value=listing) as m:
        result = stripe_gateway.list_customers(25)
    m.assert_called_once_with(limit=25, api_key="sk_test_abc")
    assert result == [{"id": "cus_1", "name": "Ann", "email": "ann@example.com"}]


def test_list_accounts(stripe_gateway):
    accounts = [make_account("acct_1", "US"), make_account("acct_2", "DE")]
    with mock.patch.object(stripe.Account, "list", return_value=SimpleNamespace(data=accounts)) as m:
        result = stripe_gateway.list_accounts()
    m.assert_called_once_with(limit=100, api_key="sk_test_abc")
    assert [a.id for a in result] == ["acct_1", "acct_2"]


def test_retrieve_checkout_session_expands(stripe_gateway):
    with mock.patch.object(stripe.checkout.Session, "retrieve", return_value="session") as m:
        assert stripe_gateway.retrieve_checkout_session("cs_1") == "session"
    m.assert_called_once_with("cs_1", expand=["payment_intent", "customer"], api_key="sk_test_abc")


def test_create_account_session(stripe_gateway):
    components = {"payments": {"enabled": True}}
    with mock.patch.object(stripe.AccountSession, "create", return_value="accs") as m:
        stripe_gateway.create_account_session("acct_1", components)
    m.assert_called_once_with(account="acct_1", components=components, api_key="sk_test_abc")


def test_api_version_is_forwarded():
    gw = StripeGateway("sk_test_abc", api_version="2024-06-20")
    with mock.patch.object(stripe.Account, "retrieve", return_value="acct") as m:
        gw.retrieve_account("acct_1")
    m.assert_called_once_with("acct_1", api_key="sk_test_abc", stripe_version="2024-06-20")


def test_stripe_error_is_wrapped(stripe_gateway):
    error = stripe.InvalidRequestError("No such customer: 'cus_x'", param="customer", code="resource_missing")
    with mock.patch.object(stripe.checkout.Session, "create", side_effect=error):
        with pytest.raises(GatewayError) as exc_info:
            stripe_gateway.create_checkout_session(customer="cus_x")
    assert exc_info.value.code == "resource_missing"
    assert "No such customer" in exc_info.value.user_message
    assert exc_info.value.__cause__ is error


def test_non_stripe_errors_propagate(stripe_gateway):
    with mock.patch.object(stripe.Customer, "list", side_effect=KeyError("boom")):
        with pytest.raises(KeyError):
            stripe_gateway.list_customers(10)
