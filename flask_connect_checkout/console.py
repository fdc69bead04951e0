"""Selection state for the operator console.

The console has three radio groups (customer, account, tier).  The current
choice for each lives in one :class:`ConsoleState`; it is immutable, and the
only ways to change it are :meth:`ConsoleState.select` and
:meth:`ConsoleState.reconcile`.  The pages carry the state in the query
string, so every reload goes through the same transitions.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Sequence

from flask_connect_checkout import pricing
from flask_connect_checkout.exceptions import ConnectCheckoutError, MissingPriceError, UnsupportedCountryError

GROUPS = {"customer": "customer_id", "account": "account_id", "tier": "tier_key"}


@dataclass(frozen=True)
class AccountContext:
    """Country/currency pair derived from the selected account."""

    country: str | None
    currency: str | None

    @property
    def locale(self) -> str:
        return connect_locale(self.country)


def connect_locale(country: str | None) -> str:
    """Locale for the embedded Connect components (``es`` for Mexico)."""
    return "es" if country == "MX" else "en"


def _first_id(items: Sequence[Mapping[str, Any]]) -> str | None:
    return items[0]["id"] if items else None


@dataclass(frozen=True)
class ConsoleState:
    customer_id: str | None = None
    account_id: str | None = None
    tier_key: str | None = pricing.DEFAULT_TIER_KEY

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "ConsoleState":
        """Build a state from request query arguments (empty values are unselected)."""
        return cls(
            customer_id=args.get("customer") or None,
            account_id=args.get("account") or None,
            tier_key=args.get("tier") or pricing.DEFAULT_TIER_KEY,
        )

    def select(self, group: str, value: str | None) -> "ConsoleState":
        """Return a copy with *group* set to *value*, replacing any prior choice."""
        try:
            attr = GROUPS[group]
        except KeyError:
            raise ValueError(f"Unknown selection group: {group!r}") from None
        return replace(self, **{attr: value or None})

    def reconcile(
        self,
        customers: Sequence[Mapping[str, Any]] | None = None,
        accounts: Sequence[Mapping[str, Any]] | None = None,
        tiers: Sequence[pricing.ProductTier] | None = None,
    ) -> "ConsoleState":
        """Re-validate selections against freshly fetched lists.

        A selection that is still listed is kept; otherwise the first item
        is selected, or nothing when the list is empty.  Passing ``None``
        for a list leaves that group untouched.
        """
        state = self
        if customers is not None:
            ids = {c["id"] for c in customers}
            if state.customer_id not in ids:
                state = state.select("customer", _first_id(customers))
        if accounts is not None:
            ids = {a["id"] for a in accounts}
            if state.account_id not in ids:
                state = state.select("account", _first_id(accounts))
        if tiers is not None:
            keys = [t.key for t in tiers]
            if state.tier_key not in keys:
                state = state.select("tier", keys[0] if keys else None)
        return state

    @property
    def ready(self) -> bool:
        """All three groups have a selection."""
        return bool(self.customer_id and self.account_id and self.tier_key)

    def account_context(self, accounts: Sequence[Mapping[str, Any]]) -> AccountContext | None:
        for account in accounts:
            if account["id"] == self.account_id:
                country = account.get("country")
                return AccountContext(
                    country=country,
                    currency=pricing.currency_for(country, account.get("default_currency")),
                )
        return None


def tier_cards(
    tiers: Sequence[pricing.ProductTier], context: AccountContext | None
) -> list[dict[str, Any]]:
    """Tier options with their price previews for the selected account.

    The preview uses :func:`pricing.quote`, the same call the checkout
    endpoint charges with.  Tiers that cannot be priced get ``display=None``.
    """
    cards = []
    for tier in tiers:
        card = {"key": tier.key, "label": tier.label, "description": tier.description, "display": None}
        if context is not None:
            try:
                priced = pricing.quote(tier, context.country, context.currency)
            except (UnsupportedCountryError, MissingPriceError):
                priced = None
            if priced is not None:
                card["amount"] = priced.amount
                card["currency"] = priced.currency
                card["display"] = priced.display
        cards.append(card)
    return cards


def price_hint(
    state: ConsoleState,
    tiers: Sequence[pricing.ProductTier],
    context: AccountContext | None,
) -> str:
    """One-line summary of the currently selected tier's price."""
    if context is None:
        return "Price shown after you select a parking lot (varies by currency)."
    tier = next((t for t in tiers if t.key == state.tier_key), None)
    if tier is None or not context.currency:
        return "Price shown after you select a parking lot."
    try:
        priced = pricing.quote(tier, context.country, context.currency)
    except MissingPriceError:
        return f"No price for {tier.label} in {context.currency.upper()}."
    except UnsupportedCountryError:
        return "Price shown after you select a parking lot."
    return f"Selected: {tier.label} - {priced.display} ({priced.country})"


# ----------------------------------------------------------------------
# Page contexts (shared by the Flask and Quart blueprints)
# ----------------------------------------------------------------------


def console_page(service, args: Mapping[str, Any]) -> dict[str, Any]:
    """Template context for the checkout console.

    Provider failures do not abort the page; the affected list renders
    empty and ``error`` carries a message for the status line.
    """
    errors = []
    try:
        customers = service.list_customers(args.get("limit"))
    except ConnectCheckoutError:
        customers = []
        errors.append("Failed to list customers")
    try:
        accounts = service.list_connected_accounts()
    except ConnectCheckoutError:
        accounts = []
        errors.append("Failed to list connected accounts")

    state = ConsoleState.from_args(args).reconcile(customers, accounts, service.tiers)
    context = state.account_context(accounts)
    return {
        "state": state,
        "customers": customers,
        "accounts": accounts,
        "account_context": context,
        "currency_for": pricing.currency_for,
        "tiers": tier_cards(service.tiers, context),
        "price_hint": price_hint(state, service.tiers, context),
        "error": "; ".join(errors) or None,
    }


def payments_page(service, args: Mapping[str, Any]) -> dict[str, Any]:
    """Template context for the connected-account payments page."""
    error = None
    try:
        accounts = service.list_connected_accounts()
    except ConnectCheckoutError:
        accounts = []
        error = "Failed to list connected accounts"

    state = ConsoleState.from_args(args).reconcile(accounts=accounts)
    context = state.account_context(accounts)
    return {
        "state": state,
        "accounts": accounts,
        "account_context": context,
        "currency_for": pricing.currency_for,
        "locale": context.locale if context else connect_locale(None),
        "account_locales": {a["id"]: connect_locale(a.get("country")) for a in accounts},
        "error": error,
    }


def return_page(service, session_id: str | None) -> dict[str, Any]:
    """Template context for the post-checkout return page."""
    if not session_id:
        return {"checkout_session": None, "error": "Missing session_id"}
    try:
        session = service.get_checkout_session_status(session_id)
    except ConnectCheckoutError as exc:
        return {"checkout_session": None, "error": str(exc)}
    amount = session.get("amount_total")
    currency = session.get("currency")
    display = pricing.format_amount(amount, currency) if amount is not None and currency else None
    return {"checkout_session": session, "amount_display": display, "error": None}
