"""bc-cli products: browse and purchase one-time products"""

from typing import TYPE_CHECKING

from api import subscriptions
from api.models import AvailablePlan, CreateOrderRequest, OrderLineItem
from cli import order_config, templates
from cli.payment import place_order, wait_for_payment
from cli.prompts import prompt_confirm, prompt_quantity, select_option
from cli.subscribe import plan_label, quantity_limits

if TYPE_CHECKING:
    from cli.cli_app import ButlerCoffeeCLI

# Products have no stored limits of their own
PRODUCT_MIN_QUANTITY = 1
PRODUCT_MAX_QUANTITY = 10


def run(app: "ButlerCoffeeCLI") -> int:
    console = app.console

    with console.status("Loading products..."):
        available = subscriptions.get_available_products(app.client)

    if not available:
        console.print("No products available at this time.")
        return 0

    product = select_option(console, "Choose a product", [(plan_label(p), p) for p in available])
    if product is None:
        return 0

    console.print(templates.render_plan_details(product))

    if not app.is_authenticated:
        console.print("\nPlease login first to purchase:\n  bc-cli login")
        return 0

    console.print()
    if prompt_confirm(console, f"Would you like to purchase {product.name} now?"):
        return purchase(app, product)
    return 0


def purchase(app: "ButlerCoffeeCLI", product: AvailablePlan) -> int:
    """Configure a single line item order and check it out"""
    console = app.console
    min_qty, max_qty = quantity_limits(product, PRODUCT_MIN_QUANTITY, PRODUCT_MAX_QUANTITY)

    console.print(templates.divider("Configure Your Order"))
    quantity = prompt_quantity(console, "How many would you like to purchase?", min_qty, max_qty, min_qty)
    console.print(f"\n[green]✓[/green] Quantity: {quantity}")

    console.print("\n  How would you like your coffee prepared?")
    grind_type = order_config.select_grind_type(console)
    brewing_method = order_config.select_brewing_method(console, grind_type)
    notes = order_config.prompt_notes(console)

    line_item = OrderLineItem(quantity=quantity, grind_type=grind_type, brewing_method=brewing_method, notes=notes)
    console.print(templates.render_order_summary(
        product.name,
        quantity,
        product.currency,
        product.price_value * quantity,
        "",
        order_config.describe_line_items([line_item]),
        notes=notes,
    ))

    if not prompt_confirm(console, "Looks good! Proceed to checkout?"):
        console.print("\nOrder cancelled.")
        return 0

    order, _ = place_order(
        app.client,
        CreateOrderRequest(product_id=product.id, total_quantity=quantity, line_items=[line_item]),
        console,
    )

    if wait_for_payment(app.client, order.id, console) is None:
        console.print("\nComplete your payment to confirm your order.")
        console.print("Your order will be processed once payment is received.")
        return 0

    console.print(templates.divider("🎉 Payment Successful!"))
    console.print(f"\n  Your order for {quantity} x {product.name} has been confirmed!")
    console.print("  We'll start preparing your coffee right away.\n")
    return 0
