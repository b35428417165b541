"""bc-cli manage: pause, resume, update or cancel existing subscriptions"""

import calendar
import datetime
import logging
from typing import TYPE_CHECKING, List, Optional, Tuple

from rich.panel import Panel

import settings
from api import subscriptions
from api.errors import ClientError
from api.models import Subscription, UpdateSubscriptionRequest
from auth.credentials import InvalidTimestampError, parse_timestamp
from cli import order_config, templates
from cli.prompts import prompt_confirm, prompt_quantity, select_option, wait_for_enter
from utils.text import format_timestamp

if TYPE_CHECKING:
    from api.client import ApiClient
    from cli.cli_app import ButlerCoffeeCLI

logger = logging.getLogger(__name__)

STATUS_ICONS = {
    "active": "✓",
    "paused": "⏸",
    "cancelled": "✕",
}

ACTION_LABELS = {
    "pause": "⏸  Pause subscription",
    "resume": "▶  Resume subscription",
    "update": "✏  Update preferences",
    "cancel": "✕ Cancel subscription",
}


def status_icon(status: str) -> str:
    return STATUS_ICONS.get(status, "•")


def available_actions(status: str) -> List[str]:
    """Actions offered for a subscription in ``status`` (exit is always added by the menu)"""
    if status == "active":
        return ["pause", "update", "cancel"]
    if status == "paused":
        return ["resume", "update", "cancel"]
    return []


def _add_month(value: datetime.datetime) -> datetime.datetime:
    year = value.year + value.month // 12
    month = value.month % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def next_shipment(started_at: str, now: Optional[datetime.datetime] = None) -> Optional[datetime.datetime]:
    """First monthly anniversary of ``started_at`` that is after ``now``"""
    try:
        shipment = parse_timestamp(started_at)
    except InvalidTimestampError:
        return None

    now = now or datetime.datetime.now(datetime.timezone.utc)
    anchor_day = shipment.day
    while shipment <= now:
        shipment = _add_month(shipment)
        # Keep the original day of month once a short month has passed
        last_day = calendar.monthrange(shipment.year, shipment.month)[1]
        shipment = shipment.replace(day=min(anchor_day, last_day))
    return shipment


def render_subscription(client: "ApiClient", subscription: Subscription) -> Panel:
    lines = [f"{status_icon(subscription.status)} Status: {subscription.status.upper()}"]
    if subscription.started_at:
        lines.append(f"Started: {format_timestamp(subscription.started_at)}")

    if subscription.status == "active" and subscription.started_at:
        shipment = next_shipment(subscription.started_at)
        if shipment is not None:
            lines.append(f"Next Shipment: {shipment.strftime('%Y-%m-%d')}")

    if subscription.default_quantity and subscription.default_preferences:
        total = subscription.total_quantity
        try:
            pricing = subscriptions.get_subscription_pricing(client, subscription.tier)
        except ClientError as e:
            logger.debug(f"Pricing unavailable for {subscription.tier}: {e}")
        else:
            lines.append(
                f"\nBilling: {pricing.price_value * total:.2f} {pricing.currency}/{pricing.billing_period}"
            )

        lines.append("\nCurrent Order Configuration:")
        lines.append(f"  Total: {total} kg per month")
        for index, preference in enumerate(subscription.default_preferences, start=1):
            item = order_config.format_line_item(
                preference.quantity_value, preference.grind_type, preference.brewing_method
            )
            lines.append(f"  {index}. {item}")

    return Panel(
        "\n".join(lines),
        title=f"[bold]Managing Subscription: {subscription.tier.upper()}[/bold]",
        title_align="left",
    )


def run(app: "ButlerCoffeeCLI") -> int:
    console = app.console

    if not app.is_authenticated:
        console.print("You must be logged in to manage subscriptions.\n\nPlease run: bc-cli login")
        return 0

    with console.status("Loading your subscriptions..."):
        all_subscriptions = subscriptions.list_subscriptions(app.client)

    if not all_subscriptions:
        console.print("You don't have any subscriptions yet.\n\nTo subscribe, run: bc-cli subscriptions")
        return 0

    manageable = [s for s in all_subscriptions if s.status != "cancelled"]
    if not manageable:
        console.print("You don't have any active subscriptions to manage.")
        console.print("All your subscriptions have been cancelled.")
        return 0

    options = []
    for subscription in manageable:
        label = f"{status_icon(subscription.status)} {subscription.tier} ({subscription.status})"
        if subscription.default_quantity:
            label += f" [dim]{subscription.total_quantity} kg/month[/dim]"
        options.append((label, subscription))

    selected = select_option(console, "Select a subscription to manage", options)
    if selected is None:
        return 0

    try:
        selected = subscriptions.get_subscription(app.client, selected.id)
    except ClientError as e:
        console.print(f"Note: Could not fetch full subscription details: {e}\n")

    return management_menu(app, selected)


def management_menu(app: "ButlerCoffeeCLI", subscription: Subscription) -> int:
    console = app.console
    while True:
        console.print(render_subscription(app.client, subscription))

        actions = available_actions(subscription.status)
        if not actions:
            console.print("No actions available for this subscription.")
            return 0

        action = select_option(console, "What would you like to do?", [(ACTION_LABELS[a], a) for a in actions])
        if action is None:
            return 0

        try:
            updated = execute_action(app, subscription, action)
        except ClientError as e:
            console.print(f"\n[red]Error:[/red] {e}")
            wait_for_enter(console)
            continue

        if updated is not None:
            subscription = updated


def execute_action(app: "ButlerCoffeeCLI", subscription: Subscription, action: str) -> Optional[Subscription]:
    handlers = {
        "pause": handle_pause,
        "resume": handle_resume,
        "update": handle_update,
        "cancel": handle_cancel,
    }
    if action not in handlers:
        raise ClientError(f"unknown action: {action}")
    return handlers[action](app, subscription)


def _run_action(app: "ButlerCoffeeCLI", message: str, call, subscription_id: str) -> Subscription:
    with app.console.status(message):
        updated = call(app.client, subscription_id)
    app.console.print(f"{message} [green]✓[/green]")
    return updated


def handle_pause(app: "ButlerCoffeeCLI", subscription: Subscription) -> Optional[Subscription]:
    console = app.console
    console.print(
        "\n[yellow]⚠[/yellow]  Pausing your subscription will:\n"
        "  • Stop upcoming shipments\n"
        "  • Pause billing\n"
        "  • Keep your preferences saved\n"
        "  • You can resume anytime\n"
    )
    if not prompt_confirm(console, "Pause subscription? (You can resume it anytime)"):
        console.print("Pause cancelled.")
        return None

    updated = _run_action(app, "Pausing subscription...", subscriptions.pause_subscription, subscription.id)
    console.print("\n[green]✓ Subscription paused successfully![/green]")
    console.print("💤 Your subscription is paused indefinitely. Use 'bc-cli manage' to resume.\n")
    return updated


def handle_resume(app: "ButlerCoffeeCLI", subscription: Subscription) -> Optional[Subscription]:
    console = app.console
    console.print("\n[green]✓[/green] Resuming your subscription will:\n  • Restart shipments\n  • Resume billing\n")
    if not prompt_confirm(console, "Resume subscription?"):
        console.print("Resume cancelled.")
        return None

    updated = _run_action(app, "Resuming subscription...", subscriptions.resume_subscription, subscription.id)
    console.print("\n[green]✓ Subscription resumed successfully![/green]")
    console.print("📦 Your next shipment will be scheduled soon.\n")
    return updated


def update_quantity_bounds(app: "ButlerCoffeeCLI") -> Tuple[int, int, int]:
    """(min, max, default) for the update prompt"""
    minimum = app.config.min_quantity_kg
    maximum = app.config.max_quantity_kg
    default = min(max(settings.DEFAULT_PREFERENCE_QUANTITY, minimum), maximum)
    return minimum, maximum, default


def handle_update(app: "ButlerCoffeeCLI", subscription: Subscription) -> Optional[Subscription]:
    console = app.console
    console.print(templates.divider("Update Subscription Preferences"))

    # Fails early when the tier is no longer offered
    subscriptions.get_subscription_pricing(app.client, subscription.tier)

    minimum, maximum, default = update_quantity_bounds(app)
    total_quantity = prompt_quantity(console, "New total quantity per month", minimum, maximum, default)
    console.print(f"\n[green]✓[/green] New quantity: {total_quantity} per month\n")

    line_items = order_config.configure_preferences(console, total_quantity)

    summary = [f"Total: {total_quantity} kg per month", "", "How your coffee will be prepared:"]
    summary.extend(
        f"  {index}. {item}"
        for index, item in enumerate(order_config.describe_line_items(line_items), start=1)
    )
    console.print(Panel("\n".join(summary), title="New Subscription Preferences", title_align="left"))

    if not prompt_confirm(console, "Update subscription with these preferences?"):
        console.print("Update cancelled.")
        return None

    request = UpdateSubscriptionRequest(total_quantity=total_quantity, preferences=line_items)
    with console.status("Updating subscription..."):
        updated = subscriptions.update_subscription(app.client, subscription.id, request)
    console.print("Updating subscription... [green]✓[/green]")
    console.print("\n[green]✓ Subscription updated successfully![/green]")
    console.print("📦 Your changes will take effect with your next shipment.\n")
    return updated


def handle_cancel(app: "ButlerCoffeeCLI", subscription: Subscription) -> Optional[Subscription]:
    console = app.console
    console.print(
        "\n[yellow]⚠[/yellow]  Warning: Cancelling your subscription will:\n"
        "  • Stop all future shipments\n"
        "  • End your billing\n"
        "  • Remove your saved preferences\n"
    )

    choice = select_option(
        console,
        "Would you rather pause?",
        [
            ("⏸  Pause subscription instead (you can resume anytime)", "pause"),
            ("✕ Cancel permanently", "cancel"),
        ],
        exit_label="← Go back",
    )
    if choice is None:
        return None
    if choice == "pause":
        return handle_pause(app, subscription)

    console.print("\n[red]This cannot be undone.[/red]")
    if not prompt_confirm(console, "Permanently cancel this subscription?", default=False):
        console.print("Cancellation aborted.")
        return None

    updated = _run_action(app, "Cancelling subscription...", subscriptions.cancel_subscription, subscription.id)
    console.print("\n[green]✓ Subscription cancelled.[/green]")
    console.print("We're sad to see you go. You can subscribe again anytime with: bc-cli subscriptions\n")
    return updated
