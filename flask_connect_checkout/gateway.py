"""Adapter over the Stripe SDK.

Each method is one provider call.  Provider errors are re-raised as
:class:`~flask_connect_checkout.exceptions.GatewayError` so the views never
depend on ``stripe`` exception types.  The secret key travels with every
request (``api_key=``); the module-global ``stripe.api_key`` is left alone so
several apps can run side by side.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import stripe

from flask_connect_checkout.exceptions import GatewayError

logger = logging.getLogger(__name__)


def attr_path(obj: Any, *path: str) -> Any:
    """Walk *path* through attributes (or dict keys), returning ``None`` on a miss."""
    for name in path:
        if obj is None:
            return None
        if isinstance(obj, dict):
            obj = obj.get(name)
        else:
            obj = getattr(obj, name, None)
    return obj


#: Resolution order for an account's display name; first non-empty value wins.
ACCOUNT_NAME_SOURCES: tuple[tuple[str, ...], ...] = (
    ("business_profile", "name"),
    ("settings", "dashboard", "display_name"),
    ("email",),
    ("id",),
)


def account_display_name(account: Any) -> str | None:
    for path in ACCOUNT_NAME_SOURCES:
        value = attr_path(account, *path)
        if value:
            return value
    return None


def serialize_account(account: Any) -> dict[str, Any]:
    """Reduce a provider account to the fields the console needs."""
    capabilities = attr_path(account, "capabilities")
    if capabilities is not None and not isinstance(capabilities, dict):
        capabilities = capabilities.to_dict() if hasattr(capabilities, "to_dict") else dict(vars(capabilities))
    return {
        "id": attr_path(account, "id"),
        "name": account_display_name(account),
        "country": attr_path(account, "country"),
        "default_currency": attr_path(account, "default_currency") or None,
        "capabilities": capabilities or {},
    }


def serialize_customer(customer: Any) -> dict[str, Any]:
    return {
        "id": attr_path(customer, "id"),
        "name": attr_path(customer, "name") or None,
        "email": attr_path(customer, "email") or None,
    }


class StripeGateway:
    """Thin wrapper around the Stripe resources used by the checkout flow."""

    def __init__(self, api_key: str, *, api_version: str | None = None) -> None:
        self._api_key = api_key
        self._api_version = api_version

    def _call(self, description: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        kwargs["api_key"] = self._api_key
        if self._api_version:
            kwargs["stripe_version"] = self._api_version
        try:
            return fn(*args, **kwargs)
        except stripe.StripeError as exc:
            logger.exception("Stripe call failed: %s", description)
            raise GatewayError(
                f"{description} failed: {exc}",
                user_message=getattr(exc, "user_message", None) or str(exc) or None,
                code=getattr(exc, "code", None),
            ) from exc

    # ------------------------------------------------------------------
    # Customers / accounts
    # ------------------------------------------------------------------

    def list_customers(self, limit: int) -> list[dict[str, Any]]:
        result = self._call("list customers", stripe.Customer.list, limit=limit)
        return [serialize_customer(c) for c in result.data]

    def list_accounts(self, limit: int = 100) -> list[Any]:
        result = self._call("list accounts", stripe.Account.list, limit=limit)
        return list(result.data)

    def retrieve_account(self, account_id: str) -> Any:
        return self._call("retrieve account", stripe.Account.retrieve, account_id)

    # ------------------------------------------------------------------
    # Checkout sessions
    # ------------------------------------------------------------------

    def create_checkout_session(self, **params: Any) -> Any:
        return self._call("create checkout session", stripe.checkout.Session.create, **params)

    def retrieve_checkout_session(self, session_id: str) -> Any:
        return self._call(
            "retrieve checkout session",
            stripe.checkout.Session.retrieve,
            session_id,
            expand=["payment_intent", "customer"],
        )

    # ------------------------------------------------------------------
    # Connect embedded components
    # ------------------------------------------------------------------

    def create_account_session(self, account_id: str, components: dict[str, Any]) -> Any:
        return self._call(
            "create account session",
            stripe.AccountSession.create,
            account=account_id,
            components=components,
        )
