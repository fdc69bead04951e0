"""Async blueprint for Quart applications.

This module mirrors :mod:`flask_connect_checkout.views` but uses
``async def`` view functions and awaits Quart's coroutine-based helpers
(``await request.get_json()``, ``await render_template()``).

It is selected automatically by :meth:`~flask_connect_checkout.ConnectCheckout.init_app`
when the application is a :class:`quart.Quart` instance.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flask_connect_checkout import console
from flask_connect_checkout.exceptions import GatewayError, ValidationError
from flask_connect_checkout.views import error_response, provider_message

if TYPE_CHECKING:
    from flask_connect_checkout import ConnectCheckout

logger = logging.getLogger(__name__)


def create_async_blueprint(ext: "ConnectCheckout"):
    """Return a Quart Blueprint pre-configured with the extension instance."""
    try:
        from quart import Blueprint, current_app, jsonify, render_template, request, url_for
    except ImportError as exc:  # pragma: no cover
        raise ImportError(
            "quart is required for flask_connect_checkout.quart_views. "
            "Install it with: pip install 'flask-connect-checkout[quart]'"
        ) from exc

    bp = Blueprint(
        "connect_checkout",
        __name__,
        template_folder="templates",
        static_folder="static",
        static_url_path="/static/connect_checkout",
    )

    # ------------------------------------------------------------------
    # Liveness / public config
    # ------------------------------------------------------------------

    @bp.route("/health")
    async def health():
        return jsonify({"ok": True})

    @bp.route("/config")
    async def public_config():
        return jsonify(ext.service.public_config())

    # ------------------------------------------------------------------
    # Customers / accounts / tiers
    # ------------------------------------------------------------------

    @bp.route("/api/customers")
    async def customers():
        try:
            data = ext.service.list_customers(request.args.get("limit"))
        except GatewayError:
            return error_response("Failed to list customers", 500)
        return jsonify({"data": data})

    @bp.route("/api/accounts")
    async def accounts():
        try:
            data = ext.service.list_connected_accounts()
        except GatewayError:
            return error_response("Failed to list connected accounts", 500)
        return jsonify({"data": data})

    @bp.route("/api/tiers")
    async def tiers():
        try:
            data = ext.service.tier_quotes(
                request.args.get("country"),
                request.args.get("currency"),
            )
        except ValidationError as exc_:
            return error_response(str(exc_), 400)
        return jsonify({"data": data})

    # ------------------------------------------------------------------
    # Checkout session
    # ------------------------------------------------------------------

    @bp.route("/api/checkout/session", methods=["POST"])
    async def create_checkout_session():
        data = await request.get_json(silent=True) or {}
        return_url = ext.return_url(
            url_for("connect_checkout.return_view", _external=True),
            current_app.config.get("CONNECT_CHECKOUT_CLIENT_HOST"),
        )
        try:
            session = ext.service.create_checkout_session(
                data.get("customerId"),
                data.get("accountId"),
                data.get("spotOption"),
                return_url=return_url,
            )
        except ValidationError as exc_:
            logger.warning("Rejected checkout session request: %s", exc_)
            return error_response(str(exc_), 400)
        except GatewayError as exc_:
            return error_response(provider_message(exc_, "Failed to create Checkout session"), 500)
        return jsonify(session)

    @bp.route("/api/checkout/session/<session_id>")
    async def checkout_session_status(session_id: str):
        try:
            status = ext.service.get_checkout_session_status(session_id)
        except GatewayError as exc_:
            return error_response(provider_message(exc_, "Failed to fetch session"), 400)
        return jsonify(status)

    # ------------------------------------------------------------------
    # Connect account session
    # ------------------------------------------------------------------

    @bp.route("/api/connect/account-session", methods=["POST"])
    async def create_account_session():
        data = await request.get_json(silent=True) or {}
        try:
            result = ext.service.create_account_session(data.get("accountId"))
        except ValidationError as exc_:
            return error_response(str(exc_), 400)
        except GatewayError as exc_:
            return error_response(provider_message(exc_, "Failed to create account session"), 500)
        return jsonify(result)

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    @bp.route("/")
    async def index():
        context = console.console_page(ext.service, request.args)
        return await render_template("connect_checkout/index.html", **context)

    @bp.route("/payments")
    async def payments():
        context = console.payments_page(ext.service, request.args)
        return await render_template("connect_checkout/payments.html", **context)

    @bp.route("/return")
    async def return_view():
        context = console.return_page(ext.service, request.args.get("session_id"))
        return await render_template("connect_checkout/return.html", **context)

    return bp
