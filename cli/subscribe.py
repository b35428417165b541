"""bc-cli subscriptions: browse tiers and subscribe"""

import logging
from typing import TYPE_CHECKING, Tuple

from api import subscriptions
from api.models import AvailablePlan, CreateOrderRequest
from cli import order_config, templates
from cli.payment import place_order, wait_for_subscription_activation
from cli.prompts import prompt_confirm, prompt_quantity, select_option

if TYPE_CHECKING:
    from cli.cli_app import ButlerCoffeeCLI

logger = logging.getLogger(__name__)


def plan_label(plan: AvailablePlan) -> str:
    label = f"{plan.name} [dim]({plan.currency} {plan.price}"
    if plan.billing_period:
        label += f"/{plan.billing_period}"
    label += ")[/dim]"
    if plan.summary:
        label += f" - {plan.summary}"
    return label


def quantity_limits(plan: AvailablePlan, min_default: int, max_default: int) -> Tuple[int, int]:
    """Plan limits, falling back to the configured ones where the plan has none"""
    return plan.min_quantity or min_default, plan.max_quantity or max_default


def run(app: "ButlerCoffeeCLI") -> int:
    console = app.console

    with console.status("Loading subscription tiers..."):
        available = subscriptions.get_available_subscriptions(app.client)

    if not available:
        console.print("No subscription tiers available at this time.")
        return 0

    plan = select_option(console, "Choose a subscription tier", [(plan_label(p), p) for p in available])
    if plan is None:
        return 0

    console.print(templates.render_plan_details(plan))

    if not app.is_authenticated:
        console.print("\nPlease login first to subscribe:\n  bc-cli login")
        return 0

    console.print()
    if prompt_confirm(console, f"Would you like to subscribe to {plan.name} now?"):
        return subscribe(app, plan)
    return 0


def subscribe(app: "ButlerCoffeeCLI", plan: AvailablePlan) -> int:
    """Configure, check out and wait for activation of a new subscription"""
    console = app.console
    min_qty, max_qty = quantity_limits(plan, app.config.min_quantity_kg, app.config.max_quantity_kg)

    console.print(templates.divider("Let's configure your coffee order!"))
    console.print("\nHow much coffee would you like per month?")
    console.print(f"You can order anywhere from {min_qty} kg to {max_qty} kg.\n")

    total_quantity = prompt_quantity(console, "Total quantity per month", min_qty, max_qty, min_qty)
    console.print(f"\n[green]✓[/green] Total: {total_quantity} per month")

    line_items = order_config.configure_preferences(console, total_quantity)

    console.print(templates.render_order_summary(
        plan.name,
        total_quantity,
        plan.currency,
        plan.price_value * total_quantity,
        plan.billing_period,
        order_config.describe_line_items(line_items),
    ))

    if not prompt_confirm(console, "Looks good! Proceed to checkout?"):
        console.print("\nOrder cancelled.")
        return 0

    order, _ = place_order(
        app.client,
        CreateOrderRequest(tier=plan.tier, total_quantity=total_quantity, line_items=line_items),
        console,
    )

    subscription = wait_for_subscription_activation(app.client, order.id, console)
    if subscription is None:
        console.print("Complete your payment to activate your subscription.")
        console.print("Your order will be processed once payment is received.")
        return 0

    logger.debug(f"Subscription {subscription.id} active for order {order.id}")
    console.print("\n🎉 [bold green]Congratulations! Your subscription is now active![/bold green]\n")
    console.print(f"📦 Your first shipment of {total_quantity} kg of fresh {plan.name} coffee")
    console.print("   will be shipped within the next 7 days.\n")
    console.print("☕ Get ready for an amazing coffee experience!")
    return 0
