"""Persistent user configuration (API URL, tokens, quantity limits)"""

import json
import logging
import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import settings
from auth.credentials import CredentialState
from auth.session import logout

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """The config file exists but cannot be read"""


@dataclass
class UserConfig:
    """Everything bc-cli remembers between runs

    Attributes:
        api_url: Base URL of the Butler Coffee API
        credentials: Session tokens (shared with the API client)
        min_quantity_kg: Lowest monthly quantity offered in prompts
        max_quantity_kg: Highest monthly quantity offered in prompts
    """
    api_url: str = settings.DEFAULT_API_URL
    credentials: CredentialState = field(default_factory=CredentialState)
    min_quantity_kg: int = settings.DEFAULT_MIN_QUANTITY
    max_quantity_kg: int = settings.DEFAULT_MAX_QUANTITY

    def is_authenticated(self) -> bool:
        return self.credentials.is_authenticated()

    def to_dict(self) -> Dict[str, Any]:
        data = {"api_url": self.api_url}
        data.update(self.credentials.to_dict())
        data["min_quantity_kg"] = self.min_quantity_kg
        data["max_quantity_kg"] = self.max_quantity_kg
        return data


class ConfigStorage:
    """Config file storage with restrictive file permissions"""

    def __init__(self, config_file: Optional[str] = None):
        self.config_path = Path(config_file if config_file else settings.CONFIG_FILE)

    def _ensure_secure_directory(self):
        """Create parent directory with secure permissions"""
        parent_dir = self.config_path.parent
        if not parent_dir.exists():
            parent_dir.mkdir(parents=True, exist_ok=True)
            # Set directory permissions to 700 on Unix-like systems
            if platform.system() != "Windows":
                os.chmod(parent_dir, 0o700)

    def load(self) -> UserConfig:
        """Load the user config, falling back to defaults

        BASE_HOSTNAME always wins over the stored API URL.

        Raises:
            ConfigError: If the file exists but is not valid JSON
        """
        data: Dict[str, Any] = {}
        if self.config_path.exists():
            try:
                data = json.loads(self.config_path.read_text())
            except (json.JSONDecodeError, OSError) as e:
                raise ConfigError(f"failed to read config file {self.config_path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigError(f"config file {self.config_path} must contain a JSON object")
        else:
            logger.debug(f"No config file at {self.config_path}, using defaults")

        api_url = settings.BASE_HOSTNAME or data.get("api_url") or settings.DEFAULT_API_URL

        return UserConfig(
            api_url=api_url,
            credentials=CredentialState.from_dict(data, safety_margin=settings.TOKEN_EXPIRY_SAFETY_MARGIN),
            min_quantity_kg=data.get("min_quantity_kg") or settings.DEFAULT_MIN_QUANTITY,
            max_quantity_kg=data.get("max_quantity_kg") or settings.DEFAULT_MAX_QUANTITY,
        )

    def save(self, config: UserConfig) -> bool:
        """Write the config file

        Returns:
            True if save was successful
        """
        try:
            self._ensure_secure_directory()
            self.config_path.write_text(json.dumps(config.to_dict(), indent=2))

            # Set file permissions to 600 on Unix-like systems
            if platform.system() != "Windows":
                os.chmod(self.config_path, 0o600)

            logger.debug(f"Saved config to {self.config_path}")
            return True

        except OSError as e:
            logger.error(f"Failed to save config: {e}")
            return False

    def clear_tokens(self, config: UserConfig) -> bool:
        """Forget the stored session and persist the result"""
        logout(config.credentials)
        return self.save(config)

    @property
    def config_file(self) -> Path:
        """Get the config file path"""
        return self.config_path
