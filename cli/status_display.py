"""Authentication status display"""

import datetime
from typing import Optional, Tuple

from rich.console import Console
from rich.table import Table

from auth.credentials import CredentialState, InvalidTimestampError, parse_timestamp
from config.storage import ConfigStorage, UserConfig
from utils.text import format_timestamp


def time_until(expires_at: Optional[str], now: Optional[datetime.datetime] = None) -> str:
    """Human readable time left before ``expires_at`` ("2h 5m", "expired")"""
    if not expires_at:
        return "no expiry"
    try:
        expiry = parse_timestamp(expires_at)
    except InvalidTimestampError:
        return "unknown"

    now = now or datetime.datetime.now(datetime.timezone.utc)
    seconds = (expiry - now).total_seconds()
    if seconds <= 0:
        return "expired"

    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)
    if days > 0:
        return f"{days}d {hours}h"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def get_auth_status(credentials: CredentialState) -> Tuple[str, str]:
    """
    Get authentication status and expiry info

    Returns:
        Tuple of (status, detail_message)
    """
    if not credentials.is_authenticated():
        return "NOT LOGGED IN", "Run 'bc-cli login' to authenticate"

    if credentials.is_refresh_token_expired():
        return "EXPIRED", "Session expired, please login again"

    if credentials.is_access_token_expired():
        return "REFRESH NEEDED", "Access token will be refreshed on the next request"

    return "VALID", f"Expires in {time_until(credentials.access_token_expires_at)}"


def show_status(config: UserConfig, storage: ConfigStorage, console: Console) -> None:
    """Print a table with the session state and both token expiries"""
    credentials = config.credentials
    status, detail = get_auth_status(credentials)

    if status == "VALID":
        status_style = "green"
    elif status in ("REFRESH NEEDED", "EXPIRED"):
        status_style = "yellow"
    else:
        status_style = "red"

    table = Table(title="Authentication Status")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Status", f"[{status_style}]{status}[/{status_style}]")
    table.add_row("Detail", detail)

    if credentials.is_authenticated():
        table.add_row(
            "Access Token Expires",
            f"{format_timestamp(credentials.access_token_expires_at)} ({time_until(credentials.access_token_expires_at)})",
        )
        table.add_row(
            "Refresh Token Expires",
            f"{format_timestamp(credentials.refresh_token_expires_at)} ({time_until(credentials.refresh_token_expires_at)})",
        )

    table.add_row("API URL", config.api_url)
    table.add_row("Config File", str(storage.config_file))

    console.print(table)
