"""Rich console that mirrors its output into the debug log.

With --debug every line shown to the user is also written, as plain text,
to the debug log file next to the request/response trace, so a session can
be replayed from the log alone.
"""

import io
import logging
import re
from typing import Optional

from rich.console import Console as RichConsole

ANSI_ESCAPE = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


class DebugCapturingConsole(RichConsole):
    """
    Rich Console that also logs a plain-text copy of everything it prints.

    Terminal output is unchanged; the copy goes to ``debug_logger`` at DEBUG.
    """

    def __init__(self, debug_logger: Optional[logging.Logger] = None, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.debug_logger = debug_logger
        self._log_prefix = "[CONSOLE] "

    def print(self, *objects, **kwargs):
        super().print(*objects, **kwargs)

        if self.debug_logger and self.debug_logger.isEnabledFor(logging.DEBUG):
            plain_text = self.render_plain(*objects, **kwargs)
            if plain_text.strip():
                self.debug_logger.debug(f"{self._log_prefix}{plain_text}")

    def input(self, prompt="", *, markup: bool = True, emoji: bool = True, password: bool = False, stream=None) -> str:
        answer = super().input(prompt, markup=markup, emoji=emoji, password=password, stream=stream)

        if self.debug_logger and self.debug_logger.isEnabledFor(logging.DEBUG):
            shown = "[hidden]" if password else repr(answer)
            self.debug_logger.debug(f"[INPUT] {self.render_plain(prompt)} -> {shown}")
        return answer

    def render_plain(self, *objects, **kwargs) -> str:
        """
        Render objects the way print would, without markup or ANSI codes.

        Returns:
            Plain text with trailing whitespace removed
        """
        buffer = io.StringIO()
        temp_console = RichConsole(
            file=buffer,
            force_terminal=False,
            width=self.width,
            legacy_windows=False
        )
        temp_console.print(*objects, **kwargs)
        return ANSI_ESCAPE.sub('', buffer.getvalue()).rstrip()


def create_debug_console(debug_enabled: bool = False,
                         debug_logger: Optional[logging.Logger] = None) -> RichConsole:
    """
    Create the console for this run.

    Returns:
        DebugCapturingConsole if debug enabled, regular Console otherwise
    """
    if debug_enabled and debug_logger:
        return DebugCapturingConsole(debug_logger=debug_logger)
    return RichConsole()


def setup_debug_logging(log_file: str, level: int = logging.DEBUG) -> logging.Logger:
    """
    Route all logging to ``log_file`` and return the console capture logger.

    The root logger gets a file handler so module loggers (request traces,
    token refresh) land in the same file as the captured console output.

    Args:
        log_file: Path to debug log file
        level: Level for the root logger

    Returns:
        Logger used by DebugCapturingConsole
    """
    file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

    root = logging.getLogger()
    root.setLevel(level)
    # Remove existing handlers to avoid duplicates
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.addHandler(file_handler)

    console_logger = logging.getLogger("bc_cli.console")
    console_logger.setLevel(logging.DEBUG)
    return console_logger
