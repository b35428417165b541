"""Subscription tiers, products and subscription management"""

from typing import List, TYPE_CHECKING

from .errors import ClientError, ValidationError
from .models import AvailablePlan, Envelope, Subscription, UpdateSubscriptionRequest, unwrap
from .validation import validate_subscription

if TYPE_CHECKING:
    from .client import ApiClient

SUBSCRIPTIONS_PATH = "/api/core/v1/subscriptions"


def _available_plans(client: "ApiClient", is_subscription: bool) -> List[AvailablePlan]:
    flag = "true" if is_subscription else "false"
    result = client.request(
        "GET",
        f"{SUBSCRIPTIONS_PATH}/available?is_subscription={flag}",
        model=Envelope[List[AvailablePlan]],
    )
    return [plan for plan in unwrap(result, []) if plan.is_active]


def get_available_subscriptions(client: "ApiClient") -> List[AvailablePlan]:
    """Active subscription tiers (no authentication needed)"""
    return _available_plans(client, is_subscription=True)


def get_available_products(client: "ApiClient") -> List[AvailablePlan]:
    """Active one-time purchase products (no authentication needed)"""
    return _available_plans(client, is_subscription=False)


def get_subscription_pricing(client: "ApiClient", tier: str) -> AvailablePlan:
    """Pricing for a subscription tier

    Raises:
        ClientError: If no active plan matches ``tier``
    """
    for plan in get_available_subscriptions(client):
        if plan.tier == tier:
            return plan
    raise ClientError(f"pricing not found for tier: {tier}")


def list_subscriptions(client: "ApiClient") -> List[Subscription]:
    result = client.request("GET", SUBSCRIPTIONS_PATH, require_auth=True, model=Envelope[List[Subscription]])
    subscriptions = unwrap(result, [])

    for index, subscription in enumerate(subscriptions):
        try:
            validate_subscription(subscription)
        except ValidationError as e:
            raise ValidationError(f"invalid subscription at index {index}: {e}") from e

    return subscriptions


def _subscription_result(result) -> Subscription:
    subscription = unwrap(result)
    if subscription is None:
        raise ClientError("empty response from subscription endpoint")
    return subscription


def get_subscription(client: "ApiClient", subscription_id: str) -> Subscription:
    """Subscription with its default preferences"""
    result = client.request(
        "GET",
        f"{SUBSCRIPTIONS_PATH}/{subscription_id}/preferences",
        require_auth=True,
        model=Envelope[Subscription],
    )
    subscription = _subscription_result(result)

    try:
        validate_subscription(subscription)
    except ValidationError as e:
        raise ValidationError(f"invalid subscription response: {e}") from e

    return subscription


def _subscription_action(client: "ApiClient", subscription_id: str, action: str) -> Subscription:
    result = client.request(
        "POST",
        f"{SUBSCRIPTIONS_PATH}/{subscription_id}/{action}",
        require_auth=True,
        model=Envelope[Subscription],
    )
    return _subscription_result(result)


def pause_subscription(client: "ApiClient", subscription_id: str) -> Subscription:
    # The backend does not support a scheduled resume date
    return _subscription_action(client, subscription_id, "pause")


def resume_subscription(client: "ApiClient", subscription_id: str) -> Subscription:
    return _subscription_action(client, subscription_id, "resume")


def cancel_subscription(client: "ApiClient", subscription_id: str) -> Subscription:
    return _subscription_action(client, subscription_id, "cancel")


def update_subscription(
    client: "ApiClient",
    subscription_id: str,
    update: UpdateSubscriptionRequest,
) -> Subscription:
    """Replace quantity and/or preferences of a subscription"""
    result = client.request(
        "PATCH",
        f"{SUBSCRIPTIONS_PATH}/{subscription_id}/preferences",
        body=update,
        require_auth=True,
        model=Envelope[Subscription],
    )
    return _subscription_result(result)
