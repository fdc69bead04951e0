"""Blueprint with the JSON API and the console pages."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flask import Blueprint, current_app, jsonify, render_template, request, url_for

from flask_connect_checkout import console
from flask_connect_checkout.exceptions import GatewayError, ValidationError

if TYPE_CHECKING:
    from flask_connect_checkout import ConnectCheckout

logger = logging.getLogger(__name__)


def error_response(message: str, status: int):
    # Plain dict so the Flask and Quart blueprints can both return it.
    return {"error": message}, status


def provider_message(exc: GatewayError, fallback: str) -> str:
    return exc.user_message or fallback


def create_blueprint(ext: "ConnectCheckout") -> Blueprint:
    """Return a Blueprint pre-configured with the extension instance."""

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
    def health():
        return jsonify({"ok": True})

    @bp.route("/config")
    def public_config():
        """Expose the publishable key so the browser can load Stripe.js."""
        return jsonify(ext.service.public_config())

    # ------------------------------------------------------------------
    # Customers / accounts / tiers
    # ------------------------------------------------------------------

    @bp.route("/api/customers")
    def customers():
        try:
            data = ext.service.list_customers(request.args.get("limit"))
        except GatewayError:
            return error_response("Failed to list customers", 500)
        return jsonify({"data": data})

    @bp.route("/api/accounts")
    def accounts():
        """Connected accounts, limited to US/CA/MX."""
        try:
            data = ext.service.list_connected_accounts()
        except GatewayError:
            return error_response("Failed to list connected accounts", 500)
        return jsonify({"data": data})

    @bp.route("/api/tiers")
    def tiers():
        """Tier price previews for ``country`` (and optional ``currency``)."""
        try:
            data = ext.service.tier_quotes(
                request.args.get("country"),
                request.args.get("currency"),
            )
        except ValidationError as exc:
            return error_response(str(exc), 400)
        return jsonify({"data": data})

    # ------------------------------------------------------------------
    # Checkout session
    # ------------------------------------------------------------------

    @bp.route("/api/checkout/session", methods=["POST"])
    def create_checkout_session():
        """Create an embedded checkout session.

        JSON body: ``customerId``, ``accountId`` and ``spotOption``
        (``standard`` when omitted).
        """
        data = request.get_json(silent=True) or {}
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
        except ValidationError as exc:
            logger.warning("Rejected checkout session request: %s", exc)
            return error_response(str(exc), 400)
        except GatewayError as exc:
            return error_response(provider_message(exc, "Failed to create Checkout session"), 500)
        return jsonify(session)

    @bp.route("/api/checkout/session/<session_id>")
    def checkout_session_status(session_id: str):
        """Return the live session status from the provider."""
        try:
            status = ext.service.get_checkout_session_status(session_id)
        except GatewayError as exc:
            return error_response(provider_message(exc, "Failed to fetch session"), 400)
        return jsonify(status)

    # ------------------------------------------------------------------
    # Connect account session
    # ------------------------------------------------------------------

    @bp.route("/api/connect/account-session", methods=["POST"])
    def create_account_session():
        data = request.get_json(silent=True) or {}
        try:
            result = ext.service.create_account_session(data.get("accountId"))
        except ValidationError as exc:
            return error_response(str(exc), 400)
        except GatewayError as exc:
            return error_response(provider_message(exc, "Failed to create account session"), 500)
        return jsonify(result)

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    @bp.route("/")
    def index():
        """Checkout console: pick customer, parking lot and spot."""
        context = console.console_page(ext.service, request.args)
        return render_template("connect_checkout/index.html", **context)

    @bp.route("/payments")
    def payments():
        """Embedded payments management for one connected account."""
        context = console.payments_page(ext.service, request.args)
        return render_template("connect_checkout/payments.html", **context)

    @bp.route("/return")
    def return_view():
        context = console.return_page(ext.service, request.args.get("session_id"))
        return render_template("connect_checkout/return.html", **context)

    return bp
