"""Order configuration: quantity split, grind type and brewing method"""

from typing import List, Optional

from rich.console import Console

import settings
from api.models import OrderLineItem
from cli import templates
from cli.prompts import prompt_confirm, prompt_quantity, prompt_text, select_option

WHOLE_BEAN = "whole_bean"
GROUND = "ground"

GRIND_TYPES = [
    (WHOLE_BEAN, "Whole Bean (I'll grind it myself)"),
    (GROUND, "Ground (We'll grind it for you)"),
]

# method -> (display name, grind size)
BREWING_METHODS = {
    "espresso": ("Espresso", "very fine"),
    "moka": ("Moka Pot", "fine-medium"),
    "v60": ("V60 Pour Over", "medium"),
    "french_press": ("French Press", "coarse"),
    "pour_over": ("Pour Over", "medium"),
    "drip": ("Drip Coffee", "medium"),
    "cold_brew": ("Cold Brew", "extra coarse"),
}


def brewing_method_display(method: str) -> str:
    return BREWING_METHODS.get(method, (method, ""))[0]


def grind_description(method: str) -> str:
    return BREWING_METHODS.get(method, (method, ""))[1]


def format_line_item(quantity: int, grind_type: str, brewing_method: str) -> str:
    """One-line description of a preference, as shown in summaries"""
    if grind_type == WHOLE_BEAN:
        return f"{quantity} → Whole beans for {brewing_method_display(brewing_method)}"
    return (
        f"{quantity} → Ground for {brewing_method_display(brewing_method)} "
        f"({grind_description(brewing_method)})"
    )


def default_preference_quantity(remaining: int) -> int:
    return min(settings.DEFAULT_PREFERENCE_QUANTITY, remaining)


def select_grind_type(console: Console) -> str:
    grind_type = select_option(console, "How would you like your beans?", GRIND_TYPES, exit_label=None)
    console.print()
    if grind_type == GROUND:
        console.print("[green]✓[/green] We'll grind these beans for you!")
    else:
        console.print("[green]✓[/green] You'll grind these beans yourself")
    return grind_type


def select_brewing_method(console: Console, grind_type: str) -> str:
    console.print("\n  What is your preferred brewing method?")
    console.print("  This helps us understand the best profiles to ensure the best tasting experience!")

    show_grind = grind_type == GROUND
    options = []
    for method, (display, grind) in BREWING_METHODS.items():
        label = f"{display} [dim]({grind} grind)[/dim]" if show_grind else display
        options.append((label, method))

    title = "Select your brewing method"
    if show_grind:
        title += " (grind size shown)"
    return select_option(console, title, options, exit_label=None)


def prompt_notes(console: Console) -> Optional[str]:
    notes = prompt_text(console, "Any notes for the roaster? [dim](optional)[/dim]")
    return notes or None


def configure_uniform_order(console: Console, total_quantity: int) -> List[OrderLineItem]:
    """All of ``total_quantity`` prepared the same way (a single line item)"""
    console.print(templates.divider())
    console.print(f"\nGreat! Let's prepare all {total_quantity} kg the same way.\n")

    grind_type = select_grind_type(console)
    brewing_method = select_brewing_method(console, grind_type)

    prepared = "whole beans, roasted" if grind_type == WHOLE_BEAN else "ground"
    console.print(
        f"\n[green]✓[/green] Perfect! All {total_quantity} will be {prepared} "
        f"for {brewing_method_display(brewing_method)}.\n"
    )

    return [OrderLineItem(quantity=total_quantity, grind_type=grind_type, brewing_method=brewing_method)]


def configure_line_items(console: Console, total_quantity: int) -> List[OrderLineItem]:
    """Split ``total_quantity`` across several preferences until all of it is allocated"""
    line_items: List[OrderLineItem] = []
    remaining = total_quantity
    preference_num = 1

    console.print(templates.divider())
    console.print(
        f"\nGreat! Now let's split your {total_quantity} kg into different grinding preferences. You can have:\n"
        "  • Whole beans (you grind at home)\n"
        "  • Pre-ground for specific brewing methods\n"
        f"We'll help you allocate all {total_quantity} kg across your preferences."
    )

    while remaining > 0:
        low_remaining = remaining < total_quantity * 0.3
        console.print()
        console.print(templates.render_preference_header(preference_num, total_quantity, remaining, low_remaining))

        quantity = prompt_quantity(
            console,
            "  How much for this preference?",
            1,
            remaining,
            default_preference_quantity(remaining),
        )
        if quantity >= remaining:
            console.print(f"\n[green]✓[/green] Allocating {quantity} (this will complete your order!)\n")
        else:
            console.print(f"\n[green]✓[/green] Allocating {quantity}\n")

        console.print(f"  How would you like these {quantity} prepared?")
        grind_type = select_grind_type(console)
        brewing_method = select_brewing_method(console, grind_type)

        line_items.append(OrderLineItem(quantity=quantity, grind_type=grind_type, brewing_method=brewing_method))
        console.print(f"\n[green]✓[/green] Added: {format_line_item(quantity, grind_type, brewing_method)}")

        remaining -= quantity
        console.print(templates.render_progress(total_quantity - remaining, total_quantity))
        preference_num += 1

    console.print(templates.divider())
    console.print(f"\n🎉 Perfect! You've allocated all {total_quantity}!\n")
    return line_items


def configure_preferences(console: Console, total_quantity: int) -> List[OrderLineItem]:
    """Ask whether to split the order, then run the matching flow

    A single unit cannot be split, so it goes straight to the uniform flow.
    """
    if total_quantity <= 1:
        return configure_uniform_order(console, total_quantity)

    console.print(templates.divider())
    console.print(
        "\nWould you like your coffee prepared different ways?\n"
        "For example, you could get:\n"
        "  • 2 kg whole bean + 3 kg ground for espresso\n"
        "  • 2 kg ground for moka + 2 kg ground for v60 + 1 kg whole bean\n\n"
        "Or keep it simple with everything the same way."
    )
    if prompt_confirm(console, "Would you like different grind methods?", default=False):
        return configure_line_items(console, total_quantity)
    return configure_uniform_order(console, total_quantity)


def describe_line_items(line_items: List[OrderLineItem]) -> List[str]:
    return [format_line_item(item.quantity, item.grind_type, item.brewing_method) for item in line_items]
