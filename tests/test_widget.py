"""Tests for the payment widget adapter."""

import pytest

from flask_dropin.errors import WidgetError
from flask_dropin.models import MOCK_PAYMENT_NONCE, PaymentMethod
from flask_dropin.widget import (
    MockWidgetInstance,
    WidgetContainer,
    WidgetInstance,
    build_widget_options,
    create_widget,
)


class CallbackFactory:
    """Factory answering through the error-first callback."""

    def __init__(self, error=None, instance=None, raises=None):
        self.error = error
        self.instance = instance if instance is not None else MockWidgetInstance()
        self.raises = raises
        self.options = None

    def create(self, options, callback):
        self.options = options
        if self.raises is not None:
            raise self.raises
        if self.error is not None:
            callback(self.error, None)
        else:
            callback(None, self.instance)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

def test_venmo_options():
    container = WidgetContainer()
    options = build_widget_options("tok", container, PaymentMethod.VENMO)

    assert options == {
        "authorization": "tok",
        "container": container,
        "card": {"flow": "vault"},
        "venmo": {"allowNewBrowserTab": False},
    }


def test_paypal_options():
    options = build_widget_options("tok", WidgetContainer(), "paypal")

    assert options["paypal"] == {"flow": "vault"}
    assert "venmo" not in options


def test_unknown_method_rejected():
    with pytest.raises(ValueError):
        build_widget_options("tok", WidgetContainer(), "bitcoin")


# ---------------------------------------------------------------------------
# Container
# ---------------------------------------------------------------------------

def test_container_mount_and_clear():
    container = WidgetContainer()
    assert not container.has_content

    container.mount("ui")
    assert container.has_content

    container.clear()
    assert container.children == []


# ---------------------------------------------------------------------------
# create_widget
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_widget_resolves_instance():
    instance = MockWidgetInstance()
    factory = CallbackFactory(instance=instance)

    created = await create_widget(factory, {"authorization": "tok"})
    assert created is instance
    assert factory.options == {"authorization": "tok"}


@pytest.mark.asyncio
async def test_create_widget_callback_error():
    factory = CallbackFactory(error=RuntimeError("bad authorization"))

    with pytest.raises(WidgetError, match="bad authorization") as info:
        await create_widget(factory, {})
    assert isinstance(info.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_create_widget_factory_raises():
    factory = CallbackFactory(raises=TypeError("container missing"))

    with pytest.raises(WidgetError, match="container missing"):
        await create_widget(factory, {})


@pytest.mark.asyncio
async def test_create_widget_string_error():
    factory = CallbackFactory(error="script blocked")

    with pytest.raises(WidgetError, match="script blocked"):
        await create_widget(factory, {})


# ---------------------------------------------------------------------------
# Mock instance
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_mock_instance_contract():
    mock = MockWidgetInstance()
    assert isinstance(mock, WidgetInstance)

    assert await mock.request_payment_method() == {"nonce": MOCK_PAYMENT_NONCE}
    assert await mock.teardown() is None
