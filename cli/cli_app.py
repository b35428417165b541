"""Main CLI application class for bc-cli"""

import logging
import traceback
from typing import Callable, Dict, Optional, Tuple

import httpx
from rich.console import Console
from rich.prompt import Prompt

from api.client import ApiClient
from api.errors import ClientError, SessionExpiredError
from auth.credentials import CredentialState
from config.storage import ConfigStorage
from cli import about, auth_handlers, learn, manage, products, subscribe
from cli.debug_setup import setup_console
from cli.menu import display_header, display_menu
from cli.prompts import wait_for_enter

logger = logging.getLogger(__name__)

Handler = Callable[["ButlerCoffeeCLI"], Optional[int]]

# name -> (handler, help)
COMMANDS: Dict[str, Tuple[Handler, str]] = {
    "register": (auth_handlers.register, "Create a Butler Coffee account"),
    "login": (auth_handlers.login, "Login to your Butler Coffee account"),
    "logout": (auth_handlers.logout, "Logout and forget stored tokens"),
    "status": (auth_handlers.status, "Show login status and token expiry"),
    "subscriptions": (subscribe.run, "Browse subscription tiers and subscribe"),
    "products": (products.run, "Browse and purchase one-time products"),
    "manage": (manage.run, "Pause, resume, update or cancel your subscriptions"),
    "learn": (learn.run, "Read coffee guides and manage bookmarks"),
    "about": (about.run, "Learn about Butler Coffee"),
}


class ButlerCoffeeCLI:
    """Holds the user config, the API client and the console for one run"""

    def __init__(
        self,
        debug: bool = False,
        storage: Optional[ConfigStorage] = None,
        http_client: Optional[httpx.Client] = None,
        console: Optional[Console] = None,
    ):
        self.debug = debug
        self.console = console or setup_console(debug)
        self.storage = storage or ConfigStorage()
        self.config = self.storage.load()
        self.client = ApiClient(
            self.config.api_url,
            self.config.credentials,
            http_client=http_client,
            on_tokens_refreshed=self._on_tokens_refreshed,
        )

    def __enter__(self) -> "ButlerCoffeeCLI":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    @property
    def is_authenticated(self) -> bool:
        return self.config.is_authenticated()

    def save_config(self) -> bool:
        saved = self.storage.save(self.config)
        if not saved:
            self.console.print(f"[yellow]Warning: could not write {self.storage.config_file}[/yellow]")
        return saved

    def _on_tokens_refreshed(self, credentials: CredentialState) -> None:
        # credentials is the same object held by self.config
        logger.debug("Tokens refreshed, saving config")
        self.save_config()

    def run_command(self, name: str) -> int:
        """Run one command and turn client errors into an exit code"""
        handler, _ = COMMANDS[name]
        logger.debug(f"Running command: {name}")
        try:
            return handler(self) or 0
        except SessionExpiredError as e:
            self.console.print(f"[red]Error:[/red] {e}")
            self.console.print("Please login again:\n  bc-cli login")
            return 1
        except ClientError as e:
            self.console.print(f"[red]Error:[/red] {e}")
            if self.debug:
                logger.debug(traceback.format_exc())
            return 1

    def run(self) -> int:
        """Main menu loop"""
        while True:
            self.console.print()
            display_header(self.console)
            entries = display_menu(self.config.credentials, self.console)

            choices = [str(index) for index in range(1, len(entries) + 2)]
            choice = int(Prompt.ask("Select option", choices=choices, console=self.console, show_choices=False))

            if choice > len(entries):
                self.console.print("\n[cyan]Goodbye![/cyan]\n")
                return 0

            command, _ = entries[choice - 1]
            self.run_command(command)
            wait_for_enter(self.console)
