"""flask_connect_checkout – Flask/Quart extension for a Stripe Connect embedded checkout."""

from __future__ import annotations

import logging
from typing import Iterable

from flask_connect_checkout.exceptions import ConfigurationError
from flask_connect_checkout.gateway import StripeGateway
from flask_connect_checkout.pricing import DEFAULT_TIERS, ProductTier
from flask_connect_checkout.service import CheckoutService
from flask_connect_checkout.version import __version__
from flask_connect_checkout.views import create_blueprint

__all__ = ["ConnectCheckout", "create_app", "__version__"]

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("STRIPE_SECRET_KEY", "STRIPE_PUBLISHABLE_KEY")


def _is_quart_app(app) -> bool:
    """Return ``True`` when *app* is a :class:`quart.Quart` instance."""
    try:
        from quart import Quart

        return isinstance(app, Quart)
    except ImportError:
        return False


class ConnectCheckout:
    """Flask/Quart extension serving the marketplace checkout console and API.

    Usage – application factory pattern::

        from flask import Flask
        from flask_connect_checkout import ConnectCheckout

        checkout_ext = ConnectCheckout()

        def create_app():
            app = Flask(__name__)
            app.config["STRIPE_SECRET_KEY"] = "sk_test_..."
            app.config["STRIPE_PUBLISHABLE_KEY"] = "pk_test_..."
            checkout_ext.init_app(app)
            return app

    Usage – with Quart (async)::

        from quart import Quart

        app = Quart(__name__)
        app.config.update(STRIPE_SECRET_KEY="sk_test_...", STRIPE_PUBLISHABLE_KEY="pk_test_...")
        ext = ConnectCheckout(app)   # async blueprint selected automatically

    Configuration keys (set on ``app.config``):

    ``STRIPE_SECRET_KEY`` / ``STRIPE_PUBLISHABLE_KEY``
        Required.  :meth:`init_app` raises :class:`ConfigurationError` when
        either is missing so the process never serves without them.
    ``STRIPE_API_VERSION``
        Optional API version pinned on every request.
    ``CONNECT_CHECKOUT_CLIENT_HOST``
        Origin allowed by CORS and used to build the checkout return URL.
        When ``None`` (default) the return URL points at this app's own
        ``/return`` page and CORS is not enabled.
    ``CONNECT_CHECKOUT_URL_PREFIX``
        URL prefix for the blueprint (default: ``None``, routes at the root).
    ``CONNECT_CHECKOUT_PRODUCT_PREFIX``
        Line item name prefix (default: ``"Parking pass"``).

    A custom *gateway* replaces the Stripe-backed one; it must expose the
    methods of :class:`~flask_connect_checkout.gateway.StripeGateway`.
    """

    def __init__(self, app=None, *, gateway=None, tiers: Iterable[ProductTier] | None = None) -> None:
        self._gateway = gateway
        self._tiers: tuple[ProductTier, ...] = tuple(tiers) if tiers is not None else DEFAULT_TIERS
        self._service: CheckoutService | None = None

        if app is not None:
            self.init_app(app)

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------

    def init_app(self, app) -> None:
        """Initialise the extension against *app* (Flask or Quart)."""
        for key in REQUIRED_KEYS:
            app.config.setdefault(key, None)
        app.config.setdefault("STRIPE_API_VERSION", None)
        app.config.setdefault("CONNECT_CHECKOUT_CLIENT_HOST", None)
        app.config.setdefault("CONNECT_CHECKOUT_URL_PREFIX", None)
        app.config.setdefault("CONNECT_CHECKOUT_PRODUCT_PREFIX", "Parking pass")

        missing = [key for key in REQUIRED_KEYS if not app.config[key]]
        if missing:
            raise ConfigurationError(f"Missing {' or '.join(missing)} in configuration")

        gateway = self._gateway
        if gateway is None:
            gateway = StripeGateway(
                app.config["STRIPE_SECRET_KEY"],
                api_version=app.config["STRIPE_API_VERSION"],
            )
        self._service = CheckoutService(
            gateway,
            app.config["STRIPE_PUBLISHABLE_KEY"],
            tiers=self._tiers,
            product_prefix=app.config["CONNECT_CHECKOUT_PRODUCT_PREFIX"],
        )

        client_host = app.config["CONNECT_CHECKOUT_CLIENT_HOST"]
        if _is_quart_app(app):
            from flask_connect_checkout.quart_views import create_async_blueprint

            blueprint = create_async_blueprint(self)
            if client_host:
                from quart_cors import cors

                cors(app, allow_origin=client_host, allow_credentials=True)
        else:
            blueprint = create_blueprint(self)
            if client_host:
                from flask_cors import CORS

                CORS(app, origins=[client_host], supports_credentials=True)

        url_prefix = app.config["CONNECT_CHECKOUT_URL_PREFIX"]
        app.register_blueprint(blueprint, url_prefix=url_prefix)

        app.extensions["connect_checkout"] = self
        logger.debug("ConnectCheckout registered at %s (client host: %s)", url_prefix or "/", client_host)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def service(self) -> CheckoutService:
        """The :class:`CheckoutService` bound to this app."""
        if self._service is None:
            raise RuntimeError(
                "ConnectCheckout extension not initialised. Call init_app(app) first."
            )
        return self._service

    @property
    def tiers(self) -> tuple[ProductTier, ...]:
        return self._tiers

    def return_url(self, external_base: str, client_host: str | None) -> str:
        """Return URL handed to Stripe; ``{CHECKOUT_SESSION_ID}`` is filled in by Stripe."""
        base = f"{client_host.rstrip('/')}/return" if client_host else external_base
        return f"{base}?session_id={{CHECKOUT_SESSION_ID}}"


def create_app(config: dict | None = None):
    """Build a Flask app configured from the environment (and ``.env``).

    Reads ``STRIPE_SECRET_KEY``, ``STRIPE_PUBLISHABLE_KEY`` and
    ``CLIENT_HOST``; values in *config* take precedence.
    """
    import os

    from dotenv import load_dotenv
    from flask import Flask

    load_dotenv()

    app = Flask(__name__)
    app.config["STRIPE_SECRET_KEY"] = os.environ.get("STRIPE_SECRET_KEY")
    app.config["STRIPE_PUBLISHABLE_KEY"] = os.environ.get("STRIPE_PUBLISHABLE_KEY")
    app.config["CONNECT_CHECKOUT_CLIENT_HOST"] = os.environ.get("CLIENT_HOST")
    if config:
        app.config.update(config)

    ConnectCheckout(app)
    return app
