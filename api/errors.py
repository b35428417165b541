"""Exceptions raised by the Butler Coffee API client"""

from typing import Optional


class ClientError(Exception):
    """Base class for every error raised by the API client"""


class TransportError(ClientError):
    """The HTTP exchange failed below the HTTP layer (DNS, connect, timeout, TLS)"""


class SessionExpiredError(ClientError):
    """The refresh token has expired; the user has to log in again"""


class RefreshFailedError(ClientError):
    """The token refresh endpoint rejected the request or could not be reached"""


class APIError(ClientError):
    """The API answered with a non-2xx status

    Attributes:
        message: Human readable message extracted from the error body
        status_code: HTTP status of the final response
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DecodeError(ClientError):
    """A 2xx response body did not match the expected shape"""


class ValidationError(ClientError):
    """A decoded API object failed sanity checks"""
