"""Drive the checkout page controller from the command line.

Start one of the example apps first, then::

    python examples/checkout_flow.py http://localhost:5000 25.00

When the backend behind the app is unreachable the controller falls back to
development mode and the payment is simulated.  No widget script is loaded
here, so a reachable backend leaves the page without a widget and the
submission is refused.
"""

import asyncio
import logging
import sys

from flask_dropin import CheckoutApi, PaymentPageController

logging.basicConfig(level=logging.DEBUG)


async def main(base_url: str, amount: str) -> None:
    done = asyncio.Event()

    def navigate(path: str) -> None:
        print(f"redirect -> {path}")
        done.set()

    controller = PaymentPageController(CheckoutApi(base_url), navigate, amount=amount)
    await controller.mount()
    print(f"view: {controller.view.value}")
    if controller.development_message:
        print(controller.development_message)

    await controller.submit()
    print(f"status: {controller.payment_status.value} {controller.error_message}")
    if controller.redirect_scheduled:
        await done.wait()
    await controller.unmount()


if __name__ == "__main__":
    base = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:5000"
    value = sys.argv[2] if len(sys.argv) > 2 else "10.00"
    asyncio.run(main(base, value))
