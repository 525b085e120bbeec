"""HTTP clients for the external payment backend and for the proxy endpoints.

:class:`BackendClient` and :class:`AsyncBackendClient` are used by the Flask
and Quart blueprints respectively to reach the external backend.
:class:`CheckoutApi` is used by the page controllers to reach the proxy
endpoints exposed by those blueprints.

All three raise the exceptions from :mod:`flask_dropin.errors`; callers are
expected to translate them into responses or user-facing messages.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import httpx

from flask_dropin.errors import HttpError, NetworkError, PayloadError
from flask_dropin.models import PaymentRequest

logger = logging.getLogger(__name__)

CLIENT_TOKEN_PATH = "/venmo/client-token"
PROCESS_PAYMENT_PATH = "/api/venmo/process-payment"

JSON_HEADERS = {"Content-Type": "application/json"}


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant {name!r}")


def parse_json_body(data: bytes | str) -> Any:
    """Decode a request body as strict JSON.

    ``NaN``, ``Infinity`` and ``-Infinity`` are rejected.

    Raises:
        ValueError: *data* is not valid JSON.
    """
    return json.loads(data, parse_constant=_reject_constant)


def _encode_body(payload: Any) -> str:
    return json.dumps(payload, allow_nan=False)


def _decode(response: httpx.Response, what: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise PayloadError(f"Invalid JSON in {what} response") from exc


def _check_client_token(response: httpx.Response) -> dict:
    if not response.is_success:
        raise HttpError(
            f"Failed to fetch client token ({response.status_code})",
            response.status_code,
        )
    return _decode(response, "client token")


def _check_payment(response: httpx.Response) -> Any:
    data = _decode(response, "payment")
    if not response.is_success:
        error = data.get("error") if isinstance(data, dict) else None
        raise HttpError(
            error or "Payment processing failed",
            response.status_code,
            data if isinstance(data, dict) else None,
        )
    return data


class BackendClient:
    """Blocking client for the external backend, used by the Flask views.

    Args:
        public_base_url: Base URL for the client-token call (read from
            ``NEXT_PUBLIC_BACKEND_URL`` by default).
        base_url: Base URL for the payment call (read from ``BACKEND_URL``
            by default).
        timeout: Per-request timeout in seconds.
        transport: Optional :mod:`httpx` transport, mainly for tests.
    """

    def __init__(
        self,
        public_base_url: str | None,
        base_url: str | None,
        *,
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.public_base_url = public_base_url
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, transport=self._transport)

    def get_client_token(self) -> dict:
        """Return the backend's client-token JSON body unchanged."""
        if not self.public_base_url:
            raise NetworkError("NEXT_PUBLIC_BACKEND_URL is not set")
        try:
            with self._client() as client:
                response = client.get(
                    f"{self.public_base_url}{CLIENT_TOKEN_PATH}",
                    headers=JSON_HEADERS,
                )
        except httpx.HTTPError as exc:
            raise NetworkError(str(exc)) from exc
        return _check_client_token(response)

    def process_payment(self, payload: Any) -> Any:
        """Forward *payload* and return the backend's JSON body unchanged."""
        if not self.base_url:
            raise NetworkError("BACKEND_URL is not set")
        try:
            with self._client() as client:
                response = client.post(
                    f"{self.base_url}{PROCESS_PAYMENT_PATH}",
                    content=_encode_body(payload),
                    headers=JSON_HEADERS,
                )
        except httpx.HTTPError as exc:
            raise NetworkError(str(exc)) from exc
        return _check_payment(response)


class AsyncBackendClient(BackendClient):
    """Coroutine flavour of :class:`BackendClient`, used by the Quart views."""

    def _async_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def get_client_token(self) -> dict:
        if not self.public_base_url:
            raise NetworkError("NEXT_PUBLIC_BACKEND_URL is not set")
        try:
            async with self._async_client() as client:
                response = await client.get(
                    f"{self.public_base_url}{CLIENT_TOKEN_PATH}",
                    headers=JSON_HEADERS,
                )
        except httpx.HTTPError as exc:
            raise NetworkError(str(exc)) from exc
        return _check_client_token(response)

    async def process_payment(self, payload: Any) -> Any:
        if not self.base_url:
            raise NetworkError("BACKEND_URL is not set")
        try:
            async with self._async_client() as client:
                response = await client.post(
                    f"{self.base_url}{PROCESS_PAYMENT_PATH}",
                    content=_encode_body(payload),
                    headers=JSON_HEADERS,
                )
        except httpx.HTTPError as exc:
            raise NetworkError(str(exc)) from exc
        return _check_payment(response)


class CheckoutApi:
    """Async client for the proxy endpoints, used by the page controllers.

    Usage::

        api = CheckoutApi("http://localhost:5000")
        token = await api.get_client_token()
    """

    def __init__(
        self,
        base_url: str,
        *,
        client_token_path: str = "/api/client-token",
        process_payment_path: str = "/api/process-payment",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client_token_url = f"{self.base_url}{client_token_path}"
        self.process_payment_url = f"{self.base_url}{process_payment_path}"
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def _send(self, method: str, url: str, timeout: float, **kwargs: Any) -> httpx.Response:
        """Send one request; the whole exchange, body included, is bounded by *timeout*."""
        try:
            async with self._client(timeout) as client:
                return await asyncio.wait_for(
                    client.request(method, url, headers=JSON_HEADERS, **kwargs),
                    timeout,
                )
        except asyncio.TimeoutError as exc:
            logger.error("Fetch error: %s timed out after %ss", url, timeout)
            raise NetworkError(f"Network error: request timed out after {timeout}s") from exc
        except httpx.HTTPError as exc:
            logger.error("Fetch error: %s", exc)
            raise NetworkError(f"Network error: {exc}") from exc

    async def get_client_token(self, timeout: float = 10.0) -> str:
        """Fetch a client token.

        Raises:
            NetworkError: The request failed or timed out.
            HttpError: The proxy answered with a non-2xx status.
            PayloadError: The body is not JSON or has no ``clientToken``.
        """
        logger.debug("Fetching client token from %s", self.client_token_url)
        response = await self._send("GET", self.client_token_url, timeout)

        if not response.is_success:
            error_text = response.text or "Unknown error"
            logger.error("Backend response error: %s %s", response.status_code, error_text)
            raise HttpError(
                f"Backend returned {response.status_code}: {error_text}",
                response.status_code,
            )

        data = _decode(response, "client token")
        token = data.get("clientToken") if isinstance(data, dict) else None
        if not token:
            raise PayloadError("No client token received from server")
        logger.debug("Client token received, length: %d", len(token))
        return token

    async def process_payment(self, request: PaymentRequest, timeout: float = 15.0) -> Any:
        """Post *request* to the payment proxy and return the decoded body.

        Raises:
            NetworkError: The request failed or timed out.
            HttpError: The proxy answered with a non-2xx status; the message
                is the proxy's ``error`` field when present.
            PayloadError: A 2xx body could not be decoded.
        """
        logger.debug("Processing payment at %s", self.process_payment_url)
        response = await self._send(
            "POST", self.process_payment_url, timeout, content=_encode_body(request.to_dict())
        )

        if not response.is_success:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            if not isinstance(error_data, dict):
                error_data = {}
            raise HttpError(
                error_data.get("error") or f"Server returned {response.status_code}",
                response.status_code,
                error_data,
            )

        result = _decode(response, "payment")
        logger.debug("Payment result: %r", result)
        return result
