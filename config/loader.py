"""Settings resolution for bc-cli

A setting is looked up in the process environment first, then in the
``.env`` files (the working directory, then ``~/.butler-coffee/.env``), and
finally falls back to the default given in ``settings.py``.
"""

import logging
import os
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

USER_ENV_FILE = Path.home() / ".butler-coffee" / ".env"

TRUE_VALUES = ("true", "1", "yes", "on")


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in TRUE_VALUES


# bool must come before int, bool is an int subclass
PARSERS: List[tuple] = [
    (bool, _parse_bool),
    (int, int),
    (float, float),
]


class ConfigLoader:
    """Typed access to environment settings backed by ``.env`` files"""

    def __init__(self, env_files: Optional[Sequence[Path]] = None):
        self.env_files = list(env_files) if env_files is not None else [Path(".env"), USER_ENV_FILE]
        self.loaded_files: List[Path] = []
        for env_file in self.env_files:
            # First file wins; variables set in the shell are never overridden
            if env_file.is_file() and load_dotenv(dotenv_path=env_file, override=False):
                self.loaded_files.append(env_file)
                logger.debug(f"Loaded settings from {env_file}")

    def _parser_for(self, default: Any) -> Optional[Callable[[str], Any]]:
        for kind, parser in PARSERS:
            if isinstance(default, kind):
                return parser
        return None

    def get(self, name: str, default: Any) -> Any:
        """Value of ``name`` coerced to the type of ``default``

        Unparsable values are logged and replaced by the default. String
        defaults starting with ``~/`` are expanded.
        """
        raw = os.environ.get(name)
        if raw is None:
            if isinstance(default, str) and default.startswith("~/"):
                return os.path.expanduser(default)
            return default

        parser = self._parser_for(default)
        if parser is None:
            return raw
        try:
            return parser(raw)
        except ValueError:
            logger.warning(f"Invalid value {name}={raw!r}, using default {default!r}")
            return default


_config_loader: Optional[ConfigLoader] = None


def get_config_loader() -> ConfigLoader:
    """Shared loader; the ``.env`` files are read on first use"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader
