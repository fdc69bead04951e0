"""Request handling shared by the Flask and Quart blueprints.

The blueprints only translate HTTP in and out; everything else happens
here.  Methods return JSON-ready dicts and raise
:class:`~flask_connect_checkout.exceptions.ValidationError` or
:class:`~flask_connect_checkout.exceptions.GatewayError`.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from flask_connect_checkout import pricing
from flask_connect_checkout.exceptions import UnsupportedCountryError, ValidationError
from flask_connect_checkout.gateway import attr_path, serialize_account

logger = logging.getLogger(__name__)

DEFAULT_CUSTOMER_LIMIT = 50
MAX_CUSTOMER_LIMIT = 100
ACCOUNT_FETCH_LIMIT = 100

#: Features enabled on the embedded ``payments`` management component.
PAYMENTS_COMPONENT_FEATURES = {
    "refund_management": True,
    "dispute_management": True,
    "capture_payments": True,
    "destination_on_behalf_of_charge_management": True,
}


def parse_limit(raw: Any, default: int = DEFAULT_CUSTOMER_LIMIT, maximum: int = MAX_CUSTOMER_LIMIT) -> int:
    """Coerce a ``limit`` query value into ``1..maximum``."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    if value < 1:
        return default
    return min(value, maximum)


class CheckoutService:
    """Checkout flow operations against a gateway.

    Args:
        gateway: Object exposing the :class:`~flask_connect_checkout.gateway.StripeGateway`
            methods.
        publishable_key: Non-secret key handed to the browser.
        tiers: Product tiers on sale (defaults to :data:`pricing.DEFAULT_TIERS`).
        product_prefix: Line item name prefix, e.g. ``"Parking pass"``.
    """

    def __init__(
        self,
        gateway,
        publishable_key: str,
        *,
        tiers: Iterable[pricing.ProductTier] | None = None,
        product_prefix: str = "Parking pass",
    ) -> None:
        self.gateway = gateway
        self.publishable_key = publishable_key
        self.tiers: tuple[pricing.ProductTier, ...] = tuple(tiers) if tiers is not None else pricing.DEFAULT_TIERS
        self.product_prefix = product_prefix

    # ------------------------------------------------------------------
    # Read-only listings
    # ------------------------------------------------------------------

    def public_config(self) -> dict[str, str]:
        return {"publishableKey": self.publishable_key}

    def list_customers(self, limit: Any = None) -> list[dict[str, Any]]:
        return self.gateway.list_customers(parse_limit(limit))

    def list_connected_accounts(self) -> list[dict[str, Any]]:
        """Return connected accounts located in a supported country only."""
        accounts = self.gateway.list_accounts(limit=ACCOUNT_FETCH_LIMIT)
        return [
            serialize_account(a)
            for a in accounts
            if attr_path(a, "country") in pricing.SUPPORTED_COUNTRIES
        ]

    def tier_quotes(self, country: str | None, currency: str | None = None) -> list[dict[str, Any]]:
        """Price every tier for *country*; the currency falls back to the country's."""
        resolved = pricing.currency_for(country, currency)
        return [pricing.quote(t, country, resolved).to_dict() for t in self.tiers]

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    def create_checkout_session(
        self,
        customer_id: str | None,
        account_id: str | None,
        tier_key: str | None,
        *,
        return_url: str,
    ) -> dict[str, Any]:
        """Create an embedded checkout session priced for the account's country.

        All validation happens before the session is created; an unknown
        tier is rejected before any provider call.
        """
        if not customer_id or not account_id:
            raise ValidationError("customerId and accountId are required")

        tier = pricing.get_tier(tier_key, self.tiers)

        account = self.gateway.retrieve_account(account_id)
        country = attr_path(account, "country")
        if country not in pricing.SUPPORTED_COUNTRIES:
            raise UnsupportedCountryError(
                country,
                "Selected connected account is not in US/CA/MX "
                "or has no supported currency for this demo.",
            )
        currency = pricing.currency_for(country, attr_path(account, "default_currency"))
        priced = pricing.quote(tier, country, currency)

        session = self.gateway.create_checkout_session(
            ui_mode="embedded",
            mode="payment",
            customer=customer_id,
            line_items=[
                {
                    "price_data": {
                        "currency": priced.currency,
                        "unit_amount": priced.amount,
                        "product_data": {
                            "name": f"{self.product_prefix} • {tier.label}",
                            "description": tier.description,
                        },
                    },
                    "quantity": 1,
                }
            ],
            payment_intent_data={
                "transfer_data": {"destination": account_id},
                "on_behalf_of": account_id,
            },
            return_url=return_url,
        )
        logger.info(
            "Created checkout session %s for %s (%s %s, tier=%s)",
            attr_path(session, "id"),
            account_id,
            priced.amount,
            priced.currency,
            tier.key,
        )
        return {
            "id": attr_path(session, "id"),
            "client_secret": attr_path(session, "client_secret"),
            "currency": priced.currency,
            "account_country": country,
            "option": tier.key,
            "amount": priced.amount,
        }

    def get_checkout_session_status(self, session_id: str) -> dict[str, Any]:
        session = self.gateway.retrieve_checkout_session(session_id)

        customer = attr_path(session, "customer")
        customer_id = customer if isinstance(customer, str) or customer is None else attr_path(customer, "id")
        intent = attr_path(session, "payment_intent")
        if isinstance(intent, str) or intent is None:
            intent_id, intent_status = intent, None
        else:
            intent_id, intent_status = attr_path(intent, "id"), attr_path(intent, "status")

        return {
            "id": attr_path(session, "id"),
            "status": attr_path(session, "status"),
            "payment_status": attr_path(session, "payment_status"),
            "amount_total": attr_path(session, "amount_total"),
            "currency": attr_path(session, "currency"),
            "customer": {
                "id": customer_id,
                "email": attr_path(session, "customer_details", "email"),
                "name": attr_path(session, "customer_details", "name"),
            },
            "payment_intent": {"id": intent_id, "status": intent_status},
            "created": attr_path(session, "created"),
        }

    # ------------------------------------------------------------------
    # Connect embedded components
    # ------------------------------------------------------------------

    def create_account_session(self, account_id: str | None) -> dict[str, Any]:
        if not account_id:
            raise ValidationError("accountId is required")
        account_session = self.gateway.create_account_session(
            account_id,
            {"payments": {"enabled": True, "features": dict(PAYMENTS_COMPONENT_FEATURES)}},
        )
        return {"client_secret": attr_path(account_session, "client_secret")}
