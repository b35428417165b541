"""CLI entry point and argument parsing"""

import argparse
import sys
import traceback
from typing import List, Optional

from rich.console import Console

import settings
from config.storage import ConfigError
from cli.cli_app import COMMANDS, ButlerCoffeeCLI


console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bc-cli",
        description="Butler Coffee from your terminal: subscriptions, products and coffee guides",
    )
    parser.add_argument("--version", action="version", version=f"bc-cli version {settings.VERSION}")
    parser.add_argument("--debug", "-d", action="store_true", help=f"Write a debug log to {settings.DEBUG_LOG_FILE}")

    subparsers = parser.add_subparsers(dest="command", metavar="command")
    for name, (_, help_text) in COMMANDS.items():
        subparsers.add_parser(name, help=help_text, description=help_text)
    return parser


def main(argv: Optional[List[str]] = None):
    """Entry point for the CLI"""
    args = build_parser().parse_args(argv)

    try:
        with ButlerCoffeeCLI(debug=args.debug) as cli:
            if args.command:
                exit_code = cli.run_command(args.command)
            else:
                exit_code = cli.run()
    except ConfigError as e:
        console.print(f"[red]ERROR:[/red] {e}")
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]Interrupted by user[/yellow]")
        console.print("Goodbye!")
        sys.exit(0)
    except Exception as e:
        console.print(f"\n[red]Fatal error:[/red] {e}")
        if args.debug:
            traceback.print_exc()
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
