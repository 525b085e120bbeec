"""Adapter around the third-party hosted payment widget.

The widget script exposes a factory with an error-first callback API::

    factory.create(options, lambda error, instance: ...)

:func:`create_widget` turns that into an awaitable so the controller can be
written as a plain sequence of ``await`` steps.  The factory itself is
injected (see :class:`WidgetFactory`) rather than looked up from a global.

Both the real instances returned by the factory and :class:`MockWidgetInstance`
satisfy :class:`WidgetInstance`, so the controller treats them identically.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Protocol, runtime_checkable

from flask_dropin.errors import WidgetError
from flask_dropin.models import MOCK_PAYMENT_NONCE, PaymentMethod

logger = logging.getLogger(__name__)


@runtime_checkable
class WidgetInstance(Protocol):
    """A live payment widget."""

    async def request_payment_method(self) -> dict[str, Any]:
        """Return a payload carrying at least a ``"nonce"`` key."""
        ...

    async def teardown(self) -> None:
        ...


class WidgetFactory(Protocol):
    """Entry point exposed by the externally loaded widget script."""

    def create(
        self,
        options: dict[str, Any],
        callback: Callable[[Any, WidgetInstance | None], None],
    ) -> None:
        ...


class WidgetContainer:
    """Mount point the widget renders into.

    Factories append whatever they render to :attr:`children`; the
    controller clears a non-empty container before creating a new widget so
    a second widget is never mounted on top of the first.
    """

    def __init__(self) -> None:
        self.children: list[Any] = []

    @property
    def has_content(self) -> bool:
        return bool(self.children)

    def mount(self, element: Any) -> None:
        self.children.append(element)

    def clear(self) -> None:
        self.children.clear()


class MockWidgetInstance:
    """Stand-in used in development mode."""

    async def request_payment_method(self) -> dict[str, Any]:
        logger.debug("Mock payment method requested")
        return {"nonce": MOCK_PAYMENT_NONCE}

    async def teardown(self) -> None:
        logger.debug("Mock instance teardown")


def build_widget_options(
    token: str,
    container: WidgetContainer,
    method: PaymentMethod | str,
) -> dict[str, Any]:
    """Return the options passed to :meth:`WidgetFactory.create`.

    Card vaulting is always enabled; the selected *method* adds its own
    section (``venmo`` or ``paypal``).
    """
    options: dict[str, Any] = {
        "authorization": token,
        "container": container,
        "card": {"flow": "vault"},
    }
    method = PaymentMethod(method)
    if method is PaymentMethod.VENMO:
        options["venmo"] = {"allowNewBrowserTab": False}
    elif method is PaymentMethod.PAYPAL:
        options["paypal"] = {"flow": "vault"}
    return options


async def create_widget(factory: WidgetFactory, options: dict[str, Any]) -> WidgetInstance:
    """Create a widget instance and wait for the factory's callback.

    Raises:
        WidgetError: The factory raised, or its callback reported an error.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()

    def callback(error: Any, instance: WidgetInstance | None) -> None:
        if future.done():
            return
        if error:
            exc = WidgetError(str(error) or "Widget creation failed")
            if isinstance(error, BaseException):
                exc.__cause__ = error
            future.set_exception(exc)
        elif instance is None:
            future.set_exception(WidgetError("Widget factory returned no instance"))
        else:
            future.set_result(instance)

    try:
        factory.create(options, callback)
    except Exception as exc:  # noqa: BLE001
        raise WidgetError(str(exc) or "Widget creation failed") from exc

    return await future
