"""Exception hierarchy shared by the proxy views and the checkout controllers."""

from __future__ import annotations


class CheckoutError(Exception):
    """Base class for every error raised by flask-dropin."""


class NetworkError(CheckoutError):
    """The request never produced a response (connection failure or timeout)."""


class HttpError(CheckoutError):
    """The backend answered with a non-2xx status code.

    Attributes:
        status_code: HTTP status returned by the backend.
        payload: Decoded JSON body of the error response, or ``{}`` when the
            body could not be decoded.
    """

    def __init__(self, message: str, status_code: int, payload: dict | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


class PayloadError(CheckoutError):
    """A JSON body could not be parsed or lacks a required field."""


class WidgetError(CheckoutError):
    """The widget script failed to load or the widget factory reported an error."""


class PaymentDeclined(CheckoutError):
    """The backend accepted the request but did not report a successful payment."""
