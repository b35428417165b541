"""Text layout helpers for terminal output"""

import shutil
from typing import List, Optional

from auth.credentials import InvalidTimestampError, parse_timestamp

DEFAULT_TERMINAL_WIDTH = 80
MIN_TERMINAL_WIDTH = 40


def get_terminal_width() -> int:
    """Current terminal width, 80 when unknown, never below 40"""
    width = shutil.get_terminal_size((DEFAULT_TERMINAL_WIDTH, 24)).columns
    if width <= 0:
        width = DEFAULT_TERMINAL_WIDTH
    return max(width, MIN_TERMINAL_WIDTH)


def _wrap_line(line: str, width: int) -> List[str]:
    words = line.split()
    if not words:
        return [""]

    lines = []
    current = ""
    for word in words:
        # Hard-split words that cannot fit on any line
        while len(word) > width:
            if current:
                lines.append(current)
                current = ""
            lines.append(word[:width])
            word = word[width:]

        if not word:
            continue
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= width:
            current = f"{current} {word}"
        else:
            lines.append(current)
            current = word

    if current:
        lines.append(current)
    return lines


def wrap_text(text: str, width: int) -> str:
    """Word-wrap ``text`` to ``width`` columns, keeping existing line breaks

    Args:
        text: Text to wrap
        width: Maximum line length; values below 1 return the text unchanged

    Returns:
        Wrapped text
    """
    if width < 1 or not text:
        return text

    wrapped = []
    for line in text.split("\n"):
        wrapped.extend(_wrap_line(line, width))
    return "\n".join(wrapped)


def wrap_text_with_indent(text: str, width: int, indent: str) -> str:
    """Wrap ``text`` and prefix every non-empty line with ``indent``"""
    wrapped = wrap_text(text, max(width - len(indent), 1))
    return "\n".join(indent + line if line else line for line in wrapped.split("\n"))


def format_timestamp(value: Optional[str], fmt: str = "%Y-%m-%d %H:%M UTC") -> str:
    """Render an API timestamp for display, or the raw value if it cannot be parsed"""
    if not value:
        return "-"
    try:
        return parse_timestamp(value).strftime(fmt)
    except InvalidTimestampError:
        return value
