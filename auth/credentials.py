"""Credential state: access/refresh tokens and their expiry checks"""

import datetime
import re
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from settings import TOKEN_EXPIRY_SAFETY_MARGIN


class InvalidTimestampError(ValueError):
    """Raised when a token expiry is neither epoch milliseconds nor RFC 3339"""


EPOCH_MS_PATTERN = re.compile(r"-?\d+", re.ASCII)
RFC3339_PATTERN = re.compile(
    r"(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})",
    re.ASCII,
)


def parse_timestamp(value: Union[str, int]) -> datetime.datetime:
    """Parse a token expiry timestamp

    The backend sends either epoch milliseconds (usually as a decimal string)
    or an RFC 3339 timestamp. RFC 3339 requires the ``T`` separator, seconds
    and an explicit offset, so date-only, naive or ISO week values are
    rejected.

    Args:
        value: Timestamp as sent by the API

    Returns:
        Timezone-aware UTC datetime

    Raises:
        InvalidTimestampError: If the value matches neither format
    """
    text = str(value).strip()

    if EPOCH_MS_PATTERN.fullmatch(text):
        seconds, millis = divmod(int(text), 1000)
        try:
            return datetime.datetime.fromtimestamp(seconds, datetime.timezone.utc) + datetime.timedelta(milliseconds=millis)
        except (OverflowError, OSError, ValueError) as e:
            raise InvalidTimestampError(f"timestamp out of range: {text}") from e

    match = RFC3339_PATTERN.fullmatch(text)
    if match is None:
        raise InvalidTimestampError(f"invalid timestamp: {value!r}")

    date, time, fraction, offset = match.groups()
    # fromisoformat only takes 3 or 6 fraction digits before Python 3.11
    micros = (fraction or "").ljust(6, "0")[:6]
    if offset == "Z":
        offset = "+00:00"
    try:
        parsed = datetime.datetime.fromisoformat(f"{date}T{time}.{micros}{offset}")
    except ValueError as e:
        raise InvalidTimestampError(f"invalid timestamp: {value!r}") from e
    return parsed.astimezone(datetime.timezone.utc)


def _is_past(expires_at: Optional[str], margin_seconds: float = 0) -> bool:
    if not expires_at:
        return False

    try:
        expiry = parse_timestamp(expires_at)
    except InvalidTimestampError:
        # Unreadable expiry counts as expired
        return True

    now = datetime.datetime.now(datetime.timezone.utc)
    return now + datetime.timedelta(seconds=margin_seconds) >= expiry


@dataclass
class CredentialState:
    """Tokens for one authenticated session

    An empty ``access_token`` means the user is not logged in. Expiry values
    are kept exactly as the API sent them and parsed on each check.

    Attributes:
        access_token: Bearer token for API calls
        refresh_token: Token used to obtain a new access token
        access_token_expires_at: Access token expiry (epoch ms or RFC 3339)
        refresh_token_expires_at: Refresh token expiry (epoch ms or RFC 3339)
        safety_margin: Seconds before expiry at which the access token is treated as expired
    """
    access_token: str = ""
    refresh_token: str = ""
    access_token_expires_at: Optional[str] = None
    refresh_token_expires_at: Optional[str] = None
    safety_margin: float = TOKEN_EXPIRY_SAFETY_MARGIN
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def is_authenticated(self) -> bool:
        return self.access_token != ""

    def is_access_token_expired(self) -> bool:
        """Check the access token against its expiry minus the safety margin"""
        return _is_past(self.access_token_expires_at, self.safety_margin)

    def is_refresh_token_expired(self) -> bool:
        """Check the refresh token against its expiry (no margin)"""
        return _is_past(self.refresh_token_expires_at)

    def apply_refresh_result(
        self,
        access_token: str,
        refresh_token: str,
        access_token_expires_at: Optional[str],
        refresh_token_expires_at: Optional[str],
    ) -> None:
        """Replace all four credential fields at once"""
        with self._lock:
            self.access_token = access_token
            self.refresh_token = refresh_token
            self.access_token_expires_at = _as_optional_str(access_token_expires_at)
            self.refresh_token_expires_at = _as_optional_str(refresh_token_expires_at)

    def clear(self) -> None:
        """Forget all tokens (logout)"""
        self.apply_refresh_result("", "", None, None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.access_token_expires_at or "",
            "refresh_token_expires_at": self.refresh_token_expires_at or "",
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], safety_margin: Optional[float] = None) -> "CredentialState":
        state = cls(
            access_token=data.get("access_token") or "",
            refresh_token=data.get("refresh_token") or "",
            access_token_expires_at=_as_optional_str(data.get("expires_at")),
            refresh_token_expires_at=_as_optional_str(data.get("refresh_token_expires_at")),
        )
        if safety_margin is not None:
            state.safety_margin = safety_margin
        return state


def _as_optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)
