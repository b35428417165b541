"""Authentication handlers for CLI"""

import logging
from typing import TYPE_CHECKING

from auth import session
from cli.prompts import prompt_required
from cli.status_display import show_status

if TYPE_CHECKING:
    from cli.cli_app import ButlerCoffeeCLI

logger = logging.getLogger(__name__)


def login(app: "ButlerCoffeeCLI") -> int:
    """
    Prompt for credentials, login and persist the new session

    Args:
        app: Running CLI application
    """
    console = app.console
    if app.is_authenticated:
        console.print("[yellow]You are already logged in; logging in again replaces the stored session.[/yellow]")

    username = prompt_required(console, "Username")
    password = prompt_required(console, "Password", password=True)

    with console.status("Logging in..."):
        tokens = session.login(app.client, username, password)

    if not app.save_config():
        return 1
    logger.debug(f"Login successful for user_id={tokens.user_id}")
    console.print(f"[green]✓ Logged in as {username}[/green]")
    return 0


def register(app: "ButlerCoffeeCLI") -> int:
    """Create an account; the new session is saved like a login"""
    console = app.console
    console.print("[bold cyan]Create your Butler Coffee account[/bold cyan]\n")

    username = prompt_required(console, "Username")
    email = prompt_required(console, "Email")
    while True:
        password = prompt_required(console, "Password", password=True)
        if password == prompt_required(console, "Confirm password", password=True):
            break
        console.print("[red]Passwords do not match, please try again[/red]")

    with console.status("Creating account..."):
        session.register(app.client, username, email, password)

    if not app.save_config():
        return 1
    console.print(f"[green]✓ Account created. Welcome, {username}![/green]")
    console.print("\nBrowse subscriptions with: bc-cli subscriptions")
    return 0


def logout(app: "ButlerCoffeeCLI") -> int:
    """
    Clear stored tokens

    Args:
        app: Running CLI application
    """
    if not app.is_authenticated:
        app.console.print("You are not logged in.")
        return 0

    if not app.storage.clear_tokens(app.config):
        app.console.print(f"[yellow]Warning: could not write {app.storage.config_file}[/yellow]")
        return 1
    app.console.print("[green]✓ Logged out[/green]")
    return 0


def status(app: "ButlerCoffeeCLI") -> int:
    show_status(app.config, app.storage, app.console)
    return 0
