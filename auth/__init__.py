"""Authentication package for the Butler Coffee API"""

from .credentials import CredentialState, InvalidTimestampError, parse_timestamp
from .token_refresh import REFRESH_PATH, refresh_tokens
from .session import login, logout, register

__all__ = [
    "CredentialState",
    "InvalidTimestampError",
    "parse_timestamp",
    "REFRESH_PATH",
    "refresh_tokens",
    "login",
    "logout",
    "register",
]
