"""Transient value types for the checkout flow.

Nothing here is persisted: a client token lives for as long as the page
controller that fetched it, and a :class:`PaymentRequest` is built on submit
and sent verbatim to the payment proxy::

    from flask_dropin.models import PaymentMethod, PaymentRequest

    request = PaymentRequest(
        payment_method_nonce="fake-nonce",
        amount="25.00",
        user_id="user_1",
        membership_id="membership_1",
        payment_method=PaymentMethod.VENMO,
    )
    request.to_dict()
    # {"paymentMethodNonce": "fake-nonce", "amount": "25.00", ...}
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

#: Placeholder client token used while in development mode.
DEVELOPMENT_CLIENT_TOKEN = "mock_client_token_for_development"

#: Nonce returned by the mock widget instance.
MOCK_PAYMENT_NONCE = "mock-payment-method-nonce"

#: Identifiers sent with every payment until an auth system supplies real ones.
DEFAULT_USER_ID = "67cbfb264a1df012485244c6"
DEFAULT_MEMBERSHIP_ID = "67ce716b2e7c3e697e2d9d7f"


class PaymentMethod(str, enum.Enum):
    """Payment methods the widget can be configured for."""

    VENMO = "venmo"
    PAYPAL = "paypal"


class PaymentStatus(str, enum.Enum):
    """Outcome of the most recent submission."""

    IDLE = "idle"
    SUCCESS = "success"
    ERROR = "error"


class PageView(str, enum.Enum):
    """What the checkout page currently renders in place of the widget."""

    LOADING = "loading"
    DEVELOPMENT = "development"
    SCRIPT_ERROR = "script_error"
    WIDGET_LOADING = "widget_loading"
    WIDGET = "widget"
    SUCCESS = "success"


@dataclass(frozen=True)
class PaymentRequest:
    """Body posted to ``/api/process-payment``.

    Attributes:
        payment_method_nonce: Single-use nonce returned by the widget.
        amount: Decimal string exactly as entered (e.g. ``"10.00"``).
        user_id: Paying user.
        membership_id: Membership being paid for.
        payment_method: Method selected when the nonce was requested.
    """

    payment_method_nonce: str
    amount: str
    user_id: str
    membership_id: str
    payment_method: PaymentMethod

    def to_dict(self) -> dict:
        """Return the wire representation (camelCase keys)."""
        return {
            "paymentMethodNonce": self.payment_method_nonce,
            "amount": self.amount,
            "userId": self.user_id,
            "membershipId": self.membership_id,
            "paymentMethod": PaymentMethod(self.payment_method).value,
        }
