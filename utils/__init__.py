"""Shared utilities for bc-cli"""

from .debug_console import (
    DebugCapturingConsole,
    create_debug_console,
    setup_debug_logging,
)
from .text import (
    format_timestamp,
    get_terminal_width,
    wrap_text,
    wrap_text_with_indent,
)

__all__ = [
    "DebugCapturingConsole",
    "create_debug_console",
    "setup_debug_logging",
    "format_timestamp",
    "get_terminal_width",
    "wrap_text",
    "wrap_text_with_indent",
]
