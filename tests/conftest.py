"""Shared pytest fixtures for flask-connect-checkout tests."""

from types import SimpleNamespace

import pytest
from flask import Flask

from flask_connect_checkout import ConnectCheckout
from flask_connect_checkout.exceptions import GatewayError


def make_account(account_id, country, *, name=None, default_currency=None, email=None, display_name=None):
    """Build a provider-shaped account object."""
    return SimpleNamespace(
        id=account_id,
        country=country,
        email=email,
        default_currency=default_currency,
        business_profile=SimpleNamespace(name=name) if name else None,
        settings=SimpleNamespace(dashboard=SimpleNamespace(display_name=display_name)),
        capabilities={"card_payments": "active", "transfers": "active"},
    )


class FakeGateway:
    """In-memory stand-in for :class:`~flask_connect_checkout.gateway.StripeGateway`.

    Every call is appended to :attr:`calls` as ``(method, args, kwargs)``.
    Set :attr:`fail` to a method name to make that method raise
    :class:`GatewayError`.
    """

    def __init__(self):
        self.calls = []
        self.fail = set()
        self.customers = [
            {"id": "cus_alice", "name": "Alice", "email": "alice@example.com"},
            {"id": "cus_bob", "name": None, "email": "bob@example.com"},
        ]
        self.accounts = [
            make_account("acct_us", "US", name="Downtown Lot", default_currency="usd"),
            make_account("acct_ca", "CA", display_name="Toronto Garage"),
            make_account("acct_mx", "MX", email="cdmx@example.com", default_currency="mxn"),
            make_account("acct_de", "DE", name="Berlin Parkhaus", default_currency="eur"),
        ]
        self.sessions = {}

    def _record(self, method, *args, **kwargs):
        self.calls.append((method, args, kwargs))
        if method in self.fail:
            raise GatewayError(f"{method} failed", user_message=f"Provider said no to {method}")

    def called(self, method):
        return [c for c in self.calls if c[0] == method]

    def list_customers(self, limit):
        self._record("list_customers", limit)
        return list(self.customers[:limit])

    def list_accounts(self, limit=100):
        self._record("list_accounts", limit=limit)
        return list(self.accounts[:limit])

    def retrieve_account(self, account_id):
        self._record("retrieve_account", account_id)
        for account in self.accounts:
            if account.id == account_id:
                return account
        raise GatewayError("retrieve account failed", user_message=f"No such account: '{account_id}'")

    def create_checkout_session(self, **params):
        self._record("create_checkout_session", **params)
        session_id = f"cs_test_{len(self.sessions) + 1}"
        session = SimpleNamespace(
            id=session_id,
            client_secret=f"{session_id}_secret",
            status="open",
            payment_status="unpaid",
            amount_total=params["line_items"][0]["price_data"]["unit_amount"],
            currency=params["line_items"][0]["price_data"]["currency"],
            customer=SimpleNamespace(id=params["customer"]),
            customer_details=None,
            payment_intent=None,
            created=1700000000,
        )
        self.sessions[session_id] = session
        return session

    def retrieve_checkout_session(self, session_id):
        self._record("retrieve_checkout_session", session_id)
        if session_id not in self.sessions:
            raise GatewayError("retrieve checkout session failed", user_message=f"No such checkout.session: '{session_id}'")
        return self.sessions[session_id]

    def create_account_session(self, account_id, components):
        self._record("create_account_session", account_id, components)
        return SimpleNamespace(client_secret=f"accs_secret_{account_id}")


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def app(gateway):
    """Flask app configured with a FakeGateway and test keys."""
    application = Flask(__name__)
    application.config["TESTING"] = True
    application.config["SERVER_NAME"] = "localhost"
    application.config["STRIPE_SECRET_KEY"] = "sk_test_123"
    application.config["STRIPE_PUBLISHABLE_KEY"] = "pk_test_123"

    ext = ConnectCheckout(application, gateway=gateway)
    application.extensions["connect_checkout_ext"] = ext

    yield application


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def ext(app):
    """The ConnectCheckout extension instance."""
    return app.extensions["connect_checkout"]
