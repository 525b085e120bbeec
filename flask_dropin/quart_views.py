"""Async blueprint for Quart applications.

This module mirrors :mod:`flask_dropin.views` but uses ``async def`` view
functions, awaits Quart's coroutine-based request helpers and talks to the
backend through :class:`~flask_dropin.backend.AsyncBackendClient`.

It is selected automatically by :meth:`~flask_dropin.FlaskDropin.init_app`
when the application is a :class:`quart.Quart` instance.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from flask_dropin.backend import parse_json_body
from flask_dropin.errors import CheckoutError, HttpError

if TYPE_CHECKING:
    from flask_dropin import FlaskDropin


def create_async_blueprint(ext: "FlaskDropin"):
    """Return a Quart Blueprint pre-configured with the extension instance."""
    try:
        from quart import Blueprint, current_app, jsonify, render_template, request
    except ImportError as exc:  # pragma: no cover
        raise ImportError(
            "quart is required for flask_dropin.quart_views. "
            "Install it with: pip install 'flask-dropin[quart]'"
        ) from exc

    bp = Blueprint("dropin", __name__, template_folder="templates")

    # ------------------------------------------------------------------
    # Client token
    # ------------------------------------------------------------------

    @bp.route("/api/client-token", methods=["GET"])
    async def client_token():
        """Proxy ``GET /venmo/client-token`` on the backend."""
        backend = ext.async_backend_client(current_app.config)
        try:
            data = await backend.get_client_token()
        except CheckoutError as exc_:
            current_app.logger.error("Error fetching client token: %s", exc_)
            return jsonify({"error": "Failed to generate client token"}), 500
        except Exception as exc_:  # noqa: BLE001
            current_app.logger.exception("Error fetching client token: %s", exc_)
            return jsonify({"error": "Failed to generate client token"}), 500
        return jsonify(data)

    # ------------------------------------------------------------------
    # Process payment
    # ------------------------------------------------------------------

    @bp.route("/api/process-payment", methods=["POST"])
    async def process_payment():
        """Proxy ``POST /api/venmo/process-payment`` on the backend."""
        backend = ext.async_backend_client(current_app.config)
        if not backend.base_url:
            current_app.logger.error("Error processing payment: BACKEND_URL is not set")
            return jsonify({"error": "BACKEND_URL is not set"}), 500

        try:
            body = parse_json_body(await request.get_data())
        except ValueError:
            return jsonify({"error": "Invalid JSON payload"}), 400

        try:
            data = await backend.process_payment(body)
        except HttpError as exc_:
            return jsonify({"error": str(exc_)}), exc_.status_code
        except CheckoutError as exc_:
            current_app.logger.error("Error processing payment: %s", exc_)
            return jsonify({"error": str(exc_) or "An unexpected error occurred"}), 500
        except Exception as exc_:  # noqa: BLE001
            current_app.logger.exception("Error processing payment: %s", exc_)
            return jsonify({"error": str(exc_) or "An unexpected error occurred"}), 500

        return jsonify(data)

    # ------------------------------------------------------------------
    # Success landing page
    # ------------------------------------------------------------------

    @bp.route("/payment-success")
    async def payment_success():
        """Static confirmation page the checkout redirects to."""
        return await render_template("dropin/payment_success.html")

    return bp
