"""Logging and console setup for the CLI"""

import logging
import os

from rich.console import Console

import settings
from utils.debug_console import create_debug_console, setup_debug_logging

logger = logging.getLogger(__name__)


def setup_console(debug: bool) -> Console:
    """
    Configure logging and return the console for this run

    Without --debug only warnings (or LOG_LEVEL) reach stderr. With it,
    everything including the request trace and the console output is
    appended to DEBUG_LOG_FILE.

    Args:
        debug: Whether debug mode is enabled

    Returns:
        Console instance (either regular or debug-enabled)
    """
    if not debug:
        logging.basicConfig(level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.WARNING))
        return Console()

    log_file = os.path.abspath(settings.DEBUG_LOG_FILE)
    console_logger = setup_debug_logging(log_file)
    console = create_debug_console(debug_enabled=True, debug_logger=console_logger)

    logger.debug("===== CLI SESSION STARTED =====")
    logger.debug(f"bc-cli {settings.VERSION}, debug log: {log_file}")
    console.print(f"[yellow]Debug mode enabled - verbose logging will be written to {log_file}[/yellow]")
    return console
