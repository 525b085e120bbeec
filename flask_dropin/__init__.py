"""flask_dropin – Flask/Quart extension for a hosted payment widget checkout."""

from __future__ import annotations

import os

from flask_dropin.backend import AsyncBackendClient, BackendClient, CheckoutApi
from flask_dropin.controller import PaymentPageController, SimplePaymentController
from flask_dropin.views import create_blueprint
from flask_dropin.version import __version__

__all__ = [
    "FlaskDropin",
    "CheckoutApi",
    "PaymentPageController",
    "SimplePaymentController",
    "__version__",
]


def _is_quart_app(app) -> bool:
    """Return ``True`` when *app* is a :class:`quart.Quart` instance."""
    try:
        from quart import Quart

        return isinstance(app, Quart)
    except ImportError:
        return False


class FlaskDropin:
    """Flask/Quart extension that proxies the checkout backend.

    Usage – application factory pattern::

        from flask import Flask
        from flask_dropin import FlaskDropin

        dropin = FlaskDropin()

        def create_app():
            app = Flask(__name__)
            dropin.init_app(app)
            return app

    Usage – direct initialisation::

        app = Flask(__name__)
        ext = FlaskDropin(app)

    Usage – with Quart (async)::

        from quart import Quart

        app = Quart(__name__)
        ext = FlaskDropin(app)   # async blueprint selected automatically

    Routes registered (relative to ``DROPIN_URL_PREFIX``):

    ``GET /api/client-token``
        Proxies ``GET {NEXT_PUBLIC_BACKEND_URL}/venmo/client-token``.
    ``POST /api/process-payment``
        Proxies ``POST {BACKEND_URL}/api/venmo/process-payment``.
    ``GET /payment-success``
        Static confirmation page.

    Configuration keys (set on ``app.config``):

    ``DROPIN_URL_PREFIX``
        URL prefix for the blueprint (default: ``""``).
    ``DROPIN_PUBLIC_BACKEND_URL``
        Backend base URL for the client-token proxy.  Defaults to the
        ``NEXT_PUBLIC_BACKEND_URL`` environment variable.
    ``DROPIN_BACKEND_URL``
        Backend base URL for the payment proxy.  Defaults to the
        ``BACKEND_URL`` environment variable.
    ``DROPIN_BACKEND_TIMEOUT``
        Timeout in seconds for backend calls (default: ``15.0``).

    The two base URLs are expected to point at the same backend but are
    read from two different variables.

    Pass ``transport=`` (an :mod:`httpx` transport) to route every backend
    call through it, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(self, app=None, *, transport=None) -> None:
        self._transport = transport

        if app is not None:
            self.init_app(app)

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------

    def init_app(self, app, *, transport=None) -> None:
        """Initialise the extension against *app* (Flask or Quart)."""
        if transport is not None:
            self._transport = transport

        app.config.setdefault("DROPIN_URL_PREFIX", "")
        app.config.setdefault("DROPIN_PUBLIC_BACKEND_URL", os.environ.get("NEXT_PUBLIC_BACKEND_URL"))
        app.config.setdefault("DROPIN_BACKEND_URL", os.environ.get("BACKEND_URL"))
        app.config.setdefault("DROPIN_BACKEND_TIMEOUT", 15.0)

        if _is_quart_app(app):
            from flask_dropin.quart_views import create_async_blueprint

            blueprint = create_async_blueprint(self)
        else:
            blueprint = create_blueprint(self)

        url_prefix = app.config["DROPIN_URL_PREFIX"] or None
        app.register_blueprint(blueprint, url_prefix=url_prefix)

        app.extensions["dropin"] = self

    # ------------------------------------------------------------------
    # Backend clients
    # ------------------------------------------------------------------

    def backend_client(self, config) -> BackendClient:
        """Return a :class:`BackendClient` built from *config*."""
        return BackendClient(
            config.get("DROPIN_PUBLIC_BACKEND_URL"),
            config.get("DROPIN_BACKEND_URL"),
            timeout=config.get("DROPIN_BACKEND_TIMEOUT", 15.0),
            transport=self._transport,
        )

    def async_backend_client(self, config) -> AsyncBackendClient:
        """Return an :class:`AsyncBackendClient` built from *config*."""
        return AsyncBackendClient(
            config.get("DROPIN_PUBLIC_BACKEND_URL"),
            config.get("DROPIN_BACKEND_URL"),
            timeout=config.get("DROPIN_BACKEND_TIMEOUT", 15.0),
            transport=self._transport,
        )
