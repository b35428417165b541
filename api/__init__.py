"""Butler Coffee API client package"""

from .errors import (
    APIError,
    ClientError,
    DecodeError,
    RefreshFailedError,
    SessionExpiredError,
    TransportError,
    ValidationError,
)
from .error_decoder import decode_error_message
from . import models
from .client import ApiClient, join_url

__all__ = [
    "ApiClient",
    "join_url",
    "decode_error_message",
    "models",
    "APIError",
    "ClientError",
    "DecodeError",
    "RefreshFailedError",
    "SessionExpiredError",
    "TransportError",
    "ValidationError",
]
