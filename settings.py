from pathlib import Path
from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# API configuration
DEFAULT_API_URL = "https://api.butler.coffee"
# BASE_HOSTNAME overrides whatever api_url is stored in the user config file
BASE_HOSTNAME = config.get("BASE_HOSTNAME", "")
API_PREFIX = "/api/core/v1"

# Timeout configuration
CONNECT_TIMEOUT = config.get("CONNECT_TIMEOUT", 10.0)
REQUEST_TIMEOUT = config.get("REQUEST_TIMEOUT", 30.0)

# Consider the access token expired this many seconds before its stated expiry
TOKEN_EXPIRY_SAFETY_MARGIN = config.get("TOKEN_EXPIRY_SAFETY_MARGIN", 30)

# Payment polling
PAYMENT_POLL_INTERVAL = config.get("PAYMENT_POLL_INTERVAL", 5)
PAYMENT_TIMEOUT = config.get("PAYMENT_TIMEOUT", 5 * 60)

# Order configuration (kg per month)
DEFAULT_MIN_QUANTITY = config.get("DEFAULT_MIN_QUANTITY", 1)
DEFAULT_MAX_QUANTITY = config.get("DEFAULT_MAX_QUANTITY", 10)
DEFAULT_PREFERENCE_QUANTITY = config.get("DEFAULT_PREFERENCE_QUANTITY", 2)

# User config storage (tokens + preferences)
CONFIG_FILE = config.get("CONFIG_FILE", str(Path.home() / ".butler-coffee" / "config.json"))

# Logging
LOG_LEVEL = config.get("LOG_LEVEL", "warning")
DEBUG_LOG_FILE = config.get("DEBUG_LOG_FILE", "bc_cli_debug.log")

VERSION = "0.4.0"
