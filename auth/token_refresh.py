"""Access token refresh for the Butler Coffee API"""

import json
import logging

import httpx
import pydantic

from api.error_decoder import decode_error_message
from api.errors import RefreshFailedError, SessionExpiredError
from api.models import AuthTokens
from .credentials import CredentialState

logger = logging.getLogger(__name__)

REFRESH_PATH = "/api/core/v1/auth/token/refresh"


def refresh_tokens(http_client: httpx.Client, url: str, credentials: CredentialState) -> None:
    """Exchange the refresh token for a new token pair

    The request is sent without a bearer header. ``credentials`` is only
    updated once a complete token payload has been read, so a failure never
    leaves it half-written.

    Args:
        http_client: Client used to send the request
        url: Absolute URL of the refresh endpoint
        credentials: Credential state to read from and update

    Raises:
        SessionExpiredError: If the refresh token has already expired
        RefreshFailedError: If there is no refresh token, the request fails,
            or the response is not a usable token payload
    """
    if credentials.is_refresh_token_expired():
        raise SessionExpiredError("refresh token expired, please login again")

    refresh_token = credentials.refresh_token
    if not refresh_token:
        raise RefreshFailedError("no refresh token available")

    logger.debug("Refreshing access token...")
    try:
        response = http_client.post(
            url,
            content=json.dumps({"refresh_token": refresh_token}).encode("utf-8"),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )
    except httpx.HTTPError as e:
        logger.debug(f"Token refresh request failed: {e}")
        raise RefreshFailedError(f"token refresh request failed: {e}") from e

    if not 200 <= response.status_code < 300:
        message = decode_error_message(response.content, response.status_code)
        logger.debug(f"Token refresh failed with status {response.status_code}: {message}")
        raise RefreshFailedError(message)

    try:
        payload = response.json()
    except ValueError as e:
        raise RefreshFailedError(f"failed to parse token refresh response: {e}") from e

    # Tokens are normally wrapped in the data envelope; accept a bare payload too
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        payload = payload["data"]

    try:
        tokens = AuthTokens.model_validate(payload)
    except pydantic.ValidationError as e:
        raise RefreshFailedError("token refresh response missing required tokens") from e

    if not tokens.access_token:
        raise RefreshFailedError("token refresh response missing required tokens")

    credentials.apply_refresh_result(
        tokens.access_token,
        tokens.refresh_token or refresh_token,
        tokens.expires_at,
        tokens.refresh_token_expires_at,
    )
    logger.debug("Successfully refreshed access token")
