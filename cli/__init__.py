"""CLI package for bc-cli

This package provides the command-line interface for Butler Coffee:
account commands, catalog browsing, ordering and subscription management.
"""

from cli.cli_app import ButlerCoffeeCLI
from cli.main import main

__all__ = [
    "ButlerCoffeeCLI",
    "main",
]
