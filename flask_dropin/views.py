"""Blueprint with the client-token and process-payment proxies and the success page."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flask import Blueprint, current_app, jsonify, render_template, request

from flask_dropin.backend import parse_json_body
from flask_dropin.errors import CheckoutError, HttpError

if TYPE_CHECKING:
    from flask_dropin import FlaskDropin


def create_blueprint(ext: "FlaskDropin") -> Blueprint:
    """Return a Blueprint pre-configured with the extension instance."""

    bp = Blueprint("dropin", __name__, template_folder="templates")

    # ------------------------------------------------------------------
    # Client token
    # ------------------------------------------------------------------

    @bp.route("/api/client-token", methods=["GET"])
    def client_token():
        """Proxy ``GET /venmo/client-token`` on the backend.

        The backend body is passed through unchanged; any failure becomes a
        500 with a fixed error message.
        """
        backend = ext.backend_client(current_app.config)
        try:
            data = backend.get_client_token()
        except CheckoutError as exc:
            current_app.logger.error("Error fetching client token: %s", exc)
            return jsonify({"error": "Failed to generate client token"}), 500
        except Exception as exc:  # noqa: BLE001
            current_app.logger.exception("Error fetching client token: %s", exc)
            return jsonify({"error": "Failed to generate client token"}), 500
        return jsonify(data)

    # ------------------------------------------------------------------
    # Process payment
    # ------------------------------------------------------------------

    @bp.route("/api/process-payment", methods=["POST"])
    def process_payment():
        """Proxy ``POST /api/venmo/process-payment`` on the backend.

        * missing ``BACKEND_URL`` – 500
        * body is not JSON – 400 ``Invalid JSON payload``
        * backend non-2xx – backend status with its ``error`` field
        * anything else going wrong – 500 with the exception message
        """
        backend = ext.backend_client(current_app.config)
        if not backend.base_url:
            current_app.logger.error("Error processing payment: BACKEND_URL is not set")
            return jsonify({"error": "BACKEND_URL is not set"}), 500

        try:
            body = parse_json_body(request.get_data())
        except ValueError:
            return jsonify({"error": "Invalid JSON payload"}), 400

        try:
            data = backend.process_payment(body)
        except HttpError as exc:
            return jsonify({"error": str(exc)}), exc.status_code
        except CheckoutError as exc:
            current_app.logger.error("Error processing payment: %s", exc)
            return jsonify({"error": str(exc) or "An unexpected error occurred"}), 500
        except Exception as exc:  # noqa: BLE001
            current_app.logger.exception("Error processing payment: %s", exc)
            return jsonify({"error": str(exc) or "An unexpected error occurred"}), 500

        return jsonify(data)

    # ------------------------------------------------------------------
    # Success landing page
    # ------------------------------------------------------------------

    @bp.route("/payment-success")
    def payment_success():
        """Static confirmation page the checkout redirects to."""
        return render_template("dropin/payment_success.html")

    return bp
