"""
Checkout — sign in, fill the cart, pay by QR code.

Level 4: kiosk.Kiosk
Level 3: kiosk.session
Level 2: kungfu.Result
"""

import httpx
from kungfu import Ok, Error

from kiosk import Kiosk, Settings
from kiosk.session import SessionState
from kiosk.timer import format_remaining
from examples._infra import (
    ConsoleNavigator,
    ScriptedConnector,
    banner,
    fake_backend,
    run,
    wait_until,
)


async def main() -> None:
    banner("Kiosk: checkout and QR payment")

    kiosk = Kiosk.from_settings(
        Settings(api_url="http://kiosk.test", confirmation_seconds=1.0),
        ConsoleNavigator(),
        connector=ScriptedConnector('{"status": "PENDING"}', '{"status": "COMPLETED"}'),
        transport=httpx.ASGITransport(app=fake_backend()),
    )

    await kiosk.sign_in("booth-7", "secret")

    products = (await kiosk.products()).unwrap()
    for p in products:
        print(f"  {p.name:<10} {p.price:>6}  stock {p.stock}")

    iced_tea, cookie, muffin = products
    kiosk.add_to_cart(iced_tea)
    kiosk.add_to_cart(iced_tea)
    for _ in range(4):
        match kiosk.add_to_cart(cookie):
            case Error(e):
                print(f"  ✗ {e.message}")
    match kiosk.add_to_cart(muffin):
        case Error(e):
            print(f"  ✗ {muffin.name}: {e.message}")

    cart = kiosk.cart.snapshot
    print(f"\nCart: {cart.item_count()} items, total {cart.total()}")

    match await kiosk.checkout():
        case Ok(payment):
            await wait_until(lambda: payment.state is not SessionState.AWAITING_METHOD_RESULT)
            print(f"  QR: {payment.request_code}  ({format_remaining(payment.remaining_seconds)} left)")
            await wait_until(lambda: payment.state.is_terminal)
            print(f"\n✓ Payment {payment.status.name}; cart still holds {kiosk.cart.snapshot.item_count()} items")
        case Error(e):
            print(f"\n✗ Checkout failed: {e.message}")
            return

    screen = kiosk.confirmation()
    screen.open()
    print(f"  Confirmation: paid {screen.total}")
    await wait_until(lambda: screen.is_done)
    print(f"  Cart after confirmation: {kiosk.cart.snapshot.item_count()} items")

    await kiosk.aclose()


if __name__ == "__main__":
    run(main)
