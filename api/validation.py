"""Sanity checks for objects returned by the API"""

from typing import Optional
from urllib.parse import urlparse

from .errors import ValidationError
from .models import CheckoutSession, Order, Subscription

MAX_ID_LENGTH = 255
MAX_TIER_LENGTH = 100
MAX_STATUS_LENGTH = 50
MAX_QUANTITY = 1000
MAX_LINE_ITEMS = 50


def validate_url(url: Optional[str]) -> None:
    """Only http(s) URLs are accepted; empty is allowed for optional fields"""
    if not url:
        return

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise ValidationError(f"invalid URL format: {e}") from e

    if parsed.scheme not in ("http", "https"):
        raise ValidationError(f"URL must use http or https scheme, got: {parsed.scheme}")


def validate_string_length(value: str, max_length: int, field_name: str) -> None:
    if len(value) > max_length:
        raise ValidationError(f"{field_name} exceeds maximum length of {max_length} characters")


def validate_subscription(subscription: Subscription) -> None:
    validate_string_length(subscription.id, MAX_ID_LENGTH, "subscription ID")
    validate_string_length(subscription.tier, MAX_TIER_LENGTH, "tier")
    validate_string_length(subscription.status, MAX_STATUS_LENGTH, "status")

    try:
        validate_url(subscription.stripe_payment_link)
    except ValidationError as e:
        raise ValidationError(f"invalid payment link: {e}") from e

    quantity = subscription.total_quantity
    if quantity < 0 or quantity > MAX_QUANTITY:
        raise ValidationError(f"invalid quantity: {quantity} (must be between 0 and {MAX_QUANTITY})")


def validate_order(order: Order) -> None:
    validate_string_length(order.id, MAX_ID_LENGTH, "order ID")
    validate_string_length(order.tier, MAX_TIER_LENGTH, "tier")
    validate_string_length(order.status, MAX_STATUS_LENGTH, "status")

    quantity = order.total_quantity_value
    if quantity < 0 or quantity > MAX_QUANTITY:
        raise ValidationError(f"invalid order quantity: {quantity:g} (must be between 0 and {MAX_QUANTITY})")

    if len(order.line_items) > MAX_LINE_ITEMS:
        raise ValidationError(f"too many line items: {len(order.line_items)} (maximum {MAX_LINE_ITEMS})")


def validate_checkout_session(session: CheckoutSession) -> None:
    try:
        validate_url(session.checkout_url)
    except ValidationError as e:
        raise ValidationError(f"invalid checkout URL: {e}") from e

    if not session.checkout_url:
        raise ValidationError("checkout URL is required")

    validate_string_length(session.session_id, MAX_ID_LENGTH, "session ID")
    validate_string_length(session.order_id, MAX_ID_LENGTH, "order ID")
