"""Login, registration and logout"""

import logging
from typing import TYPE_CHECKING

from api.errors import ClientError
from api.models import AuthTokens, Envelope, LoginRequest, RegisterRequest, unwrap
from .credentials import CredentialState

if TYPE_CHECKING:
    from api.client import ApiClient

logger = logging.getLogger(__name__)

AUTH_PATH = "/api/core/v1/auth"


def _store_tokens(credentials: CredentialState, tokens: AuthTokens) -> None:
    credentials.apply_refresh_result(
        tokens.access_token,
        tokens.refresh_token,
        tokens.expires_at,
        tokens.refresh_token_expires_at,
    )


def _tokens_from(result) -> AuthTokens:
    tokens = unwrap(result)
    if tokens is None or not tokens.access_token:
        raise ClientError("authentication response did not include an access token")
    return tokens


def login(client: "ApiClient", username: str, password: str) -> AuthTokens:
    """Log in and store the returned tokens in ``client.credentials``

    Args:
        client: API client whose credentials will be replaced
        username: Account username
        password: Account password

    Returns:
        The token payload (includes ``user_id``)
    """
    result = client.request(
        "POST",
        f"{AUTH_PATH}/login",
        body=LoginRequest(username=username, password=password),
        model=Envelope[AuthTokens],
    )
    tokens = _tokens_from(result)
    _store_tokens(client.credentials, tokens)
    logger.info(f"Logged in as user {tokens.user_id or username}")
    return tokens


def register(client: "ApiClient", username: str, email: str, password: str) -> AuthTokens:
    """Create an account; the new session is stored like a login"""
    result = client.request(
        "POST",
        f"{AUTH_PATH}/register",
        body=RegisterRequest(username=username, email=email, password=password),
        model=Envelope[AuthTokens],
    )
    tokens = _tokens_from(result)
    _store_tokens(client.credentials, tokens)
    logger.info(f"Registered user {tokens.id or username}")
    return tokens


def logout(credentials: CredentialState) -> None:
    """Forget the local session (tokens are not revoked server-side)"""
    credentials.clear()
    logger.info("Cleared local credentials")
