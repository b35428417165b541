"""Interactive main menu (shown when bc-cli runs without a command)"""

from rich.console import Console
from rich.panel import Panel

from auth.credentials import CredentialState
from cli.status_display import get_auth_status

# (command, label, requires login)
MENU_ITEMS = [
    ("subscriptions", "Browse subscriptions", False),
    ("products", "Browse products", False),
    ("manage", "Manage my subscriptions", True),
    ("learn", "Learn about coffee", False),
    ("about", "About Butler Coffee", False),
    ("status", "Show login status", False),
]


def display_header(console: Console):
    """Display the application header"""
    console.print(Panel.fit(
        "[bold cyan]Butler Coffee[/bold cyan]\n"
        "[dim]Specialty coffee from your terminal[/dim]",
        border_style="cyan"
    ))


def menu_commands(credentials: CredentialState) -> list:
    """Menu entries as ``(command, label)`` pairs for the current session"""
    entries = []
    for command, label, requires_login in MENU_ITEMS:
        if requires_login and not credentials.is_authenticated():
            continue
        entries.append((command, label))

    if credentials.is_authenticated():
        entries.append(("logout", "Logout"))
    else:
        entries.append(("login", "Login"))
        entries.append(("register", "Create an account"))
    return entries


def display_menu(credentials: CredentialState, console: Console) -> list:
    """
    Display the main menu

    Returns:
        The entries shown, in order, as ``(command, label)`` pairs
    """
    auth_status, auth_detail = get_auth_status(credentials)

    if auth_status == "VALID":
        status_style = "green"
    elif auth_status in ("REFRESH NEEDED", "EXPIRED"):
        status_style = "yellow"
    else:
        status_style = "red"

    console.print(f" Account: [{status_style}]{auth_status}[/{status_style}] ({auth_detail})")
    console.print("-" * 50)

    entries = menu_commands(credentials)
    for index, (_, label) in enumerate(entries, start=1):
        console.print(f"  [cyan]{index}[/cyan]. {label}")
    console.print(f"  [cyan]{len(entries) + 1}[/cyan]. Exit")
    console.print("=" * 50)
    return entries
