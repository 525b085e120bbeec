"""Shared pytest fixtures for flask-dropin tests."""

import httpx
import pytest
from flask import Flask

from flask_dropin import FlaskDropin

PUBLIC_BACKEND_URL = "http://public-backend.test"
BACKEND_URL = "http://backend.test"


class FakeBackend:
    """``httpx.MockTransport`` handler standing in for the payment backend.

    Serves both the external backend routes and the proxy routes, so the
    same fake works for the blueprints and for :class:`CheckoutApi`.
    """

    def __init__(self):
        self.requests = []
        self.error = None
        self.routes = {}
        token = {"clientToken": "fake-client-token"}
        paid = {"status": "success", "transaction": {"id": "txn_123"}}
        self.respond("GET", "/venmo/client-token", 200, token)
        self.respond("POST", "/api/venmo/process-payment", 200, paid)
        self.respond("GET", "/api/client-token", 200, token)
        self.respond("POST", "/api/process-payment", 200, paid)

    def respond(self, method, path, status, body):
        self.routes[(method, path)] = (status, body)

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def __call__(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        status, body = route
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)


@pytest.fixture
def backend():
    """Fake backend answering every call with a successful response."""
    return FakeBackend()


@pytest.fixture
def transport(backend):
    return httpx.MockTransport(backend)


@pytest.fixture
def app(transport):
    """Flask app wired to the fake backend."""
    application = Flask(__name__)
    application.config["TESTING"] = True
    application.config["DROPIN_PUBLIC_BACKEND_URL"] = PUBLIC_BACKEND_URL
    application.config["DROPIN_BACKEND_URL"] = BACKEND_URL

    FlaskDropin(application, transport=transport)

    yield application


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def ext(app):
    """The FlaskDropin extension instance."""
    return app.extensions["dropin"]
