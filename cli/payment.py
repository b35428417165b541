"""Checkout and payment confirmation polling"""

import logging
import time
import webbrowser
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Tuple, TypeVar

from rich.console import Console

import settings
from api import orders, subscriptions
from api.errors import ClientError, SessionExpiredError
from api.models import CheckoutSession, CreateOrderRequest, Order, Subscription

if TYPE_CHECKING:
    from api.client import ApiClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

PAID_STATUS = "paid"
ACTIVE_STATUS = "active"


def find_active_subscription(items: Iterable[Subscription]) -> Optional[Subscription]:
    for subscription in items:
        if subscription.status == ACTIVE_STATUS:
            return subscription
    return None


def poll(
    check: Callable[[], Optional[T]],
    console: Console,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Optional[T]:
    """Call ``check`` every ``interval`` seconds until it returns a value

    Each tick waits first and then checks once. Client errors during a
    tick are logged and polling continues, except an expired session,
    which is raised at once.

    Returns:
        The first non-None result, or None once ``timeout`` has elapsed
    """
    timeout = settings.PAYMENT_TIMEOUT if timeout is None else timeout
    interval = settings.PAYMENT_POLL_INTERVAL if interval is None else interval
    deadline = clock() + timeout
    dots = 0

    while clock() < deadline:
        sleep(interval)
        try:
            result = check()
        except SessionExpiredError:
            console.print(" " * 50, end="\r")
            raise
        except ClientError as e:
            logger.debug(f"Payment status check failed: {e}")
            result = None
        if result is not None:
            console.print(" " * 50, end="\r")
            return result

        dots = dots % 3 + 1
        console.print(f"Checking payment status{'.' * dots}   ", end="\r")

    console.print(" " * 50)
    return None


def wait_for_payment(client: "ApiClient", order_id: str, console: Console, **poll_options) -> Optional[Order]:
    """Poll until the order is paid; returns the paid order or None on timeout"""
    def check() -> Optional[Order]:
        order = orders.get_order(client, order_id)
        return order if order.status == PAID_STATUS else None

    return poll(check, console, **poll_options)


def wait_for_subscription_activation(
    client: "ApiClient",
    order_id: str,
    console: Console,
    **poll_options,
) -> Optional[Subscription]:
    """Poll until the order is paid and an active subscription exists"""
    def check() -> Optional[Subscription]:
        order = orders.get_order(client, order_id)
        if order.status != PAID_STATUS:
            return None
        return find_active_subscription(subscriptions.list_subscriptions(client))

    return poll(check, console, **poll_options)


def open_browser(url: str) -> bool:
    try:
        return webbrowser.open(url)
    except webbrowser.Error as e:
        logger.debug(f"Could not open browser: {e}")
        return False


def place_order(client: "ApiClient", order_request: CreateOrderRequest, console: Console) -> Tuple[Order, CheckoutSession]:
    """Create the order, start a checkout session and open it in the browser"""
    with console.status("Creating order..."):
        order = orders.create_order(client, order_request)
    console.print("Creating order... [green]✓[/green]")

    with console.status("Opening checkout in your browser..."):
        checkout = orders.create_checkout_session(client, order.id)
    console.print("Opening checkout in your browser... [green]✓[/green]")

    if not open_browser(checkout.checkout_url):
        console.print(f"\nCouldn't open browser automatically. Please visit:\n{checkout.checkout_url}")

    console.print("\nOrder created successfully!")
    console.print(f"Order ID: {order.id}\n")
    console.print("Waiting for payment confirmation...")
    console.print(f"(You have {int(settings.PAYMENT_TIMEOUT) // 60} minutes to complete the payment)")
    return order, checkout
