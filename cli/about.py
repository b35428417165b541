"""bc-cli about"""

from typing import TYPE_CHECKING

from cli.templates import render_about

if TYPE_CHECKING:
    from cli.cli_app import ButlerCoffeeCLI


def run(app: "ButlerCoffeeCLI") -> int:
    app.console.print(render_about())
    return 0
