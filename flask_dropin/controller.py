"""Headless page controllers for the checkout flow.

:class:`PaymentPageController` holds every piece of UI state of the checkout
page and drives the flow one awaited step at a time::

    controller = PaymentPageController(
        CheckoutApi("http://localhost:5000"),
        navigate=router.push,
        widget_factory=dropin,
    )
    await controller.mount()          # fetch token (or fall back)
    await controller.on_script_load()  # widget script is ready
    await controller.select_payment_method("paypal")
    await controller.submit()         # nonce -> payment -> redirect
    await controller.unmount()

If the client token cannot be fetched the controller switches to
development mode: a placeholder token and a :class:`MockWidgetInstance` keep
the flow usable and payments are simulated locally.

All waiting is cooperative (asyncio).  The one shared resource, the current
widget instance, is only replaced by the widget refresh chain: every refresh
waits for the previous one to settle, and tears the old instance down before
creating a new one.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable

from flask_dropin.backend import CheckoutApi
from flask_dropin.errors import PaymentDeclined, WidgetError
from flask_dropin.models import (
    DEFAULT_MEMBERSHIP_ID,
    DEFAULT_USER_ID,
    DEVELOPMENT_CLIENT_TOKEN,
    MOCK_PAYMENT_NONCE,
    PageView,
    PaymentMethod,
    PaymentRequest,
    PaymentStatus,
)
from flask_dropin.widget import (
    MockWidgetInstance,
    WidgetContainer,
    WidgetFactory,
    WidgetInstance,
    build_widget_options,
    create_widget,
)

logger = logging.getLogger(__name__)

SUCCESS_PATH = "/payment-success"
DEVELOPMENT_MESSAGE = "Using development mode due to connection error"


def _go(navigate: Callable[[str], Any], path: str) -> None:
    result = navigate(path)
    if inspect.isawaitable(result):
        asyncio.ensure_future(result)


def _is_successful(result: Any) -> bool:
    if not isinstance(result, dict):
        return False
    return result.get("status") == "success" or bool(result.get("transaction"))


class BasePageController:
    """Token fetching and liveness tracking shared by both checkout pages."""

    def __init__(
        self,
        api: CheckoutApi,
        navigate: Callable[[str], Any],
        *,
        amount: str = "10.00",
        payment_method: PaymentMethod | str = PaymentMethod.VENMO,
        success_path: str = SUCCESS_PATH,
        token_timeout: float = 10.0,
        simulated_delay: float = 1.0,
    ) -> None:
        self.api = api
        self.navigate = navigate
        self.success_path = success_path
        self.token_timeout = token_timeout
        self.simulated_delay = simulated_delay

        self.client_token: str | None = None
        self.amount = amount
        self.payment_method = PaymentMethod(payment_method)
        self.is_processing = False
        self.error_message = ""
        self.is_development_mode = False
        self.development_message = ""
        self.is_loading = True

        self._mounted = False

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    async def mount(self) -> None:
        """Fetch the client token, falling back to development mode on failure."""
        self._mounted = True
        self.is_loading = True
        self.error_message = ""
        try:
            token = await self.api.get_client_token(timeout=self.token_timeout)
        except Exception as exc:  # noqa: BLE001
            logger.error("Error fetching client token: %s", exc)
            if self._mounted:
                self.error_message = (
                    f"Failed to connect to payment service: {str(exc) or 'Unknown error'}"
                )
                logger.debug("Switching to development mode due to error")
                self._enter_development_mode()
        else:
            if self._mounted:
                self.client_token = token
                self.is_development_mode = False
        finally:
            if self._mounted:
                self.is_loading = False

    def _enter_development_mode(self) -> None:
        self.is_development_mode = True

    async def unmount(self) -> None:
        self._mounted = False


class SimplePaymentController(BasePageController):
    """Checkout page without a widget: submitting only simulates the payment."""

    async def submit(self) -> None:
        if self.is_processing:
            return
        self.is_processing = True
        self.error_message = ""
        try:
            await asyncio.sleep(self.simulated_delay)
            result = self.navigate(self.success_path)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:  # noqa: BLE001
            logger.error("Payment error: %s", exc)
            if self._mounted:
                self.error_message = f"An unexpected error occurred: {str(exc) or 'Unknown error'}"
        finally:
            if self._mounted:
                self.is_processing = False


class PaymentPageController(BasePageController):
    """Checkout page backed by the hosted payment widget.

    Args:
        api: Client for the proxy endpoints.
        navigate: Called with :attr:`success_path` once a payment succeeds
            and :attr:`redirect_delay` has elapsed.
        widget_factory: The widget script's factory, or ``None`` when the
            script never loaded.
        container: Mount point handed to the factory.
        user_id: Sent with every payment request.
        membership_id: Sent with every payment request.
        payment_timeout: Timeout for the payment proxy call, in seconds.
        settle_delay: Pause before each widget (re)initialisation.
        redirect_delay: Time the success view stays up before redirecting.
    """

    def __init__(
        self,
        api: CheckoutApi,
        navigate: Callable[[str], Any],
        *,
        widget_factory: WidgetFactory | None = None,
        container: WidgetContainer | None = None,
        user_id: str = DEFAULT_USER_ID,
        membership_id: str = DEFAULT_MEMBERSHIP_ID,
        payment_timeout: float = 15.0,
        settle_delay: float = 0.1,
        redirect_delay: float = 2.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(api, navigate, **kwargs)
        self.widget_factory = widget_factory
        self.container = container if container is not None else WidgetContainer()
        self.user_id = user_id
        self.membership_id = membership_id
        self.payment_timeout = payment_timeout
        self.settle_delay = settle_delay
        self.redirect_delay = redirect_delay

        self.payment_status = PaymentStatus.IDLE
        self.instance: WidgetInstance | None = None
        self.script_loaded = False
        self.script_error = False

        self._widget_task: asyncio.Task | None = None
        self._redirect_handle: asyncio.TimerHandle | None = None

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def can_submit(self) -> bool:
        """Mirrors the enabled state of the pay button."""
        return not self.is_processing and (
            self.instance is not None or self.is_development_mode
        )

    @property
    def redirect_scheduled(self) -> bool:
        return self._redirect_handle is not None

    @property
    def view(self) -> PageView:
        if self.payment_status is PaymentStatus.SUCCESS:
            return PageView.SUCCESS
        if self.is_loading:
            return PageView.LOADING
        if self.is_development_mode:
            return PageView.DEVELOPMENT
        if self.script_error:
            return PageView.SCRIPT_ERROR
        if self.instance is None:
            return PageView.WIDGET_LOADING
        return PageView.WIDGET

    # ------------------------------------------------------------------
    # Lifecycle events
    # ------------------------------------------------------------------

    async def mount(self) -> None:
        await super().mount()
        await self._refresh_widget()

    def _enter_development_mode(self) -> None:
        super()._enter_development_mode()
        self.development_message = DEVELOPMENT_MESSAGE
        self.client_token = DEVELOPMENT_CLIENT_TOKEN
        logger.debug("Setting up mock payment instance for development mode")
        self.instance = MockWidgetInstance()

    async def on_script_load(self) -> None:
        """The widget script finished loading."""
        logger.debug("Widget script loaded successfully")
        self.script_loaded = True
        await self._refresh_widget()

    def on_script_error(self, error: Any = None) -> None:
        """The widget script failed to load; real-widget rendering stops here."""
        logger.error("Failed to load widget script: %s", error)
        self.script_error = True

    async def select_payment_method(self, method: PaymentMethod | str) -> None:
        """Switch methods, re-creating the widget with matching options."""
        method = PaymentMethod(method)
        if method is self.payment_method:
            return
        self.payment_method = method
        await self._refresh_widget()

    async def update_client_token(self, token: str) -> None:
        """Replace the client token, re-creating the widget for it."""
        self.client_token = token
        await self._refresh_widget()

    async def unmount(self) -> None:
        await super().unmount()
        instance, self.instance = self.instance, None
        if instance is not None:
            logger.debug("Cleaning up widget instance on unmount")
            await self._teardown_quietly(instance)

    # ------------------------------------------------------------------
    # Widget chain
    # ------------------------------------------------------------------

    def _widget_wanted(self) -> bool:
        return bool(
            self._mounted
            and self.client_token
            and self.script_loaded
            and not self.is_development_mode
            and not self.script_error
        )

    async def _refresh_widget(self) -> None:
        previous = self._widget_task
        task = asyncio.ensure_future(self._initialize_widget(previous))
        self._widget_task = task
        await task

    async def _initialize_widget(self, previous: asyncio.Task | None) -> None:
        if previous is not None and not previous.done():
            await asyncio.wait([previous])
        if not self._widget_wanted():
            return

        await asyncio.sleep(self.settle_delay)
        if not self._widget_wanted():
            return

        if self.widget_factory is None:
            logger.error("Widget library not loaded")
            self.script_error = True
            return

        old, self.instance = self.instance, None
        if old is not None:
            logger.debug("Tearing down previous widget instance")
            try:
                await old.teardown()
            except Exception:  # noqa: BLE001
                logger.exception("Error tearing down widget instance")
                if self._mounted:
                    self.instance = old
                return
            if not self._mounted:
                return

        if self.container.has_content:
            logger.debug("Container is not empty, clearing it")
            self.container.clear()

        options = build_widget_options(self.client_token, self.container, self.payment_method)
        try:
            instance = await create_widget(self.widget_factory, options)
        except WidgetError:
            logger.exception("Error creating widget instance")
            if self._mounted:
                self.script_error = True
            return

        if not self._mounted:
            await self._teardown_quietly(instance)
            return

        logger.debug("Widget instance created successfully")
        self.instance = instance

    async def _teardown_quietly(self, instance: WidgetInstance) -> None:
        try:
            await instance.teardown()
        except Exception:  # noqa: BLE001
            logger.exception("Error tearing down widget instance")

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(self) -> None:
        """Request a nonce, send the payment and schedule the redirect."""
        if self.is_processing or self.payment_status is PaymentStatus.SUCCESS:
            return

        instance = self.instance
        development = self.is_development_mode
        if instance is None and not development:
            self.error_message = "Payment system not initialized"
            return

        self.is_processing = True
        self.payment_status = PaymentStatus.IDLE
        self.error_message = ""

        try:
            if development:
                nonce = MOCK_PAYMENT_NONCE
                logger.debug("Using mock payment nonce in development mode")
            else:
                logger.debug("Requesting payment method from widget")
                payload = await instance.request_payment_method()
                nonce = payload["nonce"]
                logger.debug("Received payment method nonce: %s", "yes" if nonce else "no")

            request = PaymentRequest(
                payment_method_nonce=nonce,
                amount=self.amount,
                user_id=self.user_id,
                membership_id=self.membership_id,
                payment_method=self.payment_method,
            )

            if development:
                logger.debug("Development mode: simulating successful payment %r", request)
                await asyncio.sleep(self.simulated_delay)
            else:
                result = await self.api.process_payment(request, timeout=self.payment_timeout)
                if not _is_successful(result):
                    raise PaymentDeclined("Payment was not successful")

            if self._mounted:
                self.payment_status = PaymentStatus.SUCCESS
                self._schedule_redirect()
        except Exception as exc:  # noqa: BLE001
            logger.error("Payment error: %s", exc)
            if self._mounted:
                self.payment_status = PaymentStatus.ERROR
                self.error_message = f"An unexpected error occurred: {str(exc) or 'Unknown error'}"
        finally:
            if self._mounted:
                self.is_processing = False

    def _schedule_redirect(self) -> None:
        if self._redirect_handle is not None:
            return
        loop = asyncio.get_running_loop()
        self._redirect_handle = loop.call_later(
            self.redirect_delay, _go, self.navigate, self.success_path
        )
