"""Interactive prompts built on rich.prompt"""

from typing import List, Optional, Sequence, Tuple, TypeVar

from rich.console import Console
from rich.prompt import Confirm, IntPrompt, Prompt

T = TypeVar("T")


def prompt_quantity(console: Console, label: str, minimum: int, maximum: int, default: int) -> int:
    """Ask for an integer in ``[minimum, maximum]``, re-asking until one is given"""
    while True:
        value = IntPrompt.ask(f"{label} [dim]({minimum}-{maximum})[/dim]", default=default, console=console)
        if minimum <= value <= maximum:
            return value
        console.print(f"[red]Please enter a number between {minimum} and {maximum}[/red]")


def prompt_confirm(console: Console, question: str, default: bool = True) -> bool:
    return Confirm.ask(question, default=default, console=console)


def prompt_text(console: Console, label: str, default: str = "", password: bool = False) -> str:
    return Prompt.ask(label, default=default, password=password, console=console, show_default=not password).strip()


def prompt_required(console: Console, label: str, password: bool = False) -> str:
    """Ask until a non-empty answer is given"""
    while True:
        value = Prompt.ask(label, password=password, console=console).strip()
        if value:
            return value
        console.print(f"[red]{label} is required[/red]")


def select_option(
    console: Console,
    title: str,
    options: Sequence[Tuple[str, T]],
    exit_label: Optional[str] = "← Exit",
) -> Optional[T]:
    """Show a numbered list and return the chosen option's value

    Args:
        console: Console to print to
        title: Heading shown above the list
        options: ``(label, value)`` pairs
        exit_label: Label for a trailing "leave" entry, or None for no such entry

    Returns:
        The selected value, or None if the exit entry was chosen
    """
    console.print(f"\n[bold]{title}[/bold]\n")
    for index, (label, _) in enumerate(options, start=1):
        console.print(f"  [cyan]{index}[/cyan]. {label}")

    choices: List[str] = [str(index) for index in range(1, len(options) + 1)]
    if exit_label:
        exit_choice = str(len(options) + 1)
        console.print(f"  [cyan]{exit_choice}[/cyan]. {exit_label}")
        choices.append(exit_choice)
    console.print()

    choice = Prompt.ask("Select option", choices=choices, console=console, show_choices=False)
    index = int(choice) - 1
    if index >= len(options):
        return None
    return options[index][1]


def wait_for_enter(console: Console, message: str = "Press Enter to continue...") -> None:
    console.input(f"\n{message}")
