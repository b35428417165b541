"""Order creation, checkout and status"""

from typing import TYPE_CHECKING

from .errors import ClientError, ValidationError
from .models import CheckoutSession, CreateOrderRequest, Envelope, Order, unwrap
from .validation import validate_checkout_session, validate_order

if TYPE_CHECKING:
    from .client import ApiClient

ORDERS_PATH = "/api/core/v1/orders"


def _validated_order(result) -> Order:
    order = unwrap(result)
    if order is None:
        raise ClientError("empty response from order endpoint")
    try:
        validate_order(order)
    except ValidationError as e:
        raise ValidationError(f"invalid order response: {e}") from e
    return order


def create_order(client: "ApiClient", order_request: CreateOrderRequest) -> Order:
    """Create a draft order from the configured line items"""
    result = client.request(
        "POST",
        f"{ORDERS_PATH}/configure",
        body=order_request,
        require_auth=True,
        model=Envelope[Order],
    )
    return _validated_order(result)


def create_checkout_session(client: "ApiClient", order_id: str) -> CheckoutSession:
    """Create a payment checkout session for an order"""
    result = client.request(
        "POST",
        f"{ORDERS_PATH}/{order_id}/checkout",
        require_auth=True,
        model=Envelope[CheckoutSession],
    )
    checkout = unwrap(result)
    if checkout is None:
        raise ClientError("empty response from checkout endpoint")

    try:
        validate_checkout_session(checkout)
    except ValidationError as e:
        raise ValidationError(f"invalid checkout session: {e}") from e

    return checkout


def get_order(client: "ApiClient", order_id: str) -> Order:
    result = client.request("GET", f"{ORDERS_PATH}/{order_id}", require_auth=True, model=Envelope[Order])
    return _validated_order(result)
