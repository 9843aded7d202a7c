"""
Identifier payment — keypad validation, server rejection, retry, cancel.

Level 4: kiosk.session
Level 2: kungfu.Result
"""

import httpx
from kungfu import Ok

from kiosk import Kiosk, Settings
from kiosk.session import PaymentMethod, SessionState
from examples._infra import (
    ConsoleNavigator,
    ScriptedConnector,
    banner,
    fake_backend,
    run,
    wait_until,
)


async def main() -> None:
    banner("Kiosk: pay by student ID")

    navigator = ConsoleNavigator()
    kiosk = Kiosk.from_settings(
        Settings(api_url="http://kiosk.test"),
        navigator,
        connector=ScriptedConnector(),
        transport=httpx.ASGITransport(app=fake_backend()),
    )
    await kiosk.sign_in("booth-7", "secret")

    products = (await kiosk.products()).unwrap()
    kiosk.add_to_cart(products[0])

    match await kiosk.checkout():
        case Ok(payment):
            pass
        case _:
            return

    await payment.wait_pending()
    print(f"  method {payment.selected_method.name}, QR {payment.request_code}")

    payment.select_method(PaymentMethod.IDENTIFIER)
    print(f"  switched to {payment.selected_method.name}, request {payment.request_id}")

    for key in "0099":
        payment.identifier.press(key)
    print(f"  typed {payment.identifier.value!r}: submitted={payment.submit_identifier()}")
    print(f"  notice: {kiosk.notifier.current.message}")

    payment.identifier.clear()
    print(f"  typed '1101': submitted={payment.submit_identifier('1101')}")
    await payment.wait_pending()
    print(f"  ✗ {payment.error.message} → {payment.error.action.name}")

    payment.retry()
    payment.submit_identifier("2314")
    await payment.wait_pending()
    print(f"  ✓ request {payment.request_id} for {payment.request_code}: {kiosk.notifier.current.message}")

    print("\nCustomer walks away, cancel:")
    payment.cancel()
    await wait_until(lambda: payment.state is SessionState.CANCELLED)
    print(f"  state {payment.state.name}, cart {kiosk.cart.snapshot.item_count()} items")

    await kiosk.aclose()


if __name__ == "__main__":
    run(main)
