"""Butler Coffee API HTTP client

Every call to the backend goes through :class:`ApiClient`. Authenticated
calls may transparently refresh the access token, either before sending
(when it is known to be expired) or after a 401 (once), so any call made
with ``require_auth=True`` can rotate the credentials it was given.
"""

import json
import logging
import threading
from typing import Any, Callable, Optional, Type, TypeVar

import httpx
import pydantic
from pydantic import BaseModel, TypeAdapter

from auth import token_refresh
from auth.credentials import CredentialState
from settings import CONNECT_TIMEOUT, REQUEST_TIMEOUT
from .error_decoder import decode_error_message
from .errors import APIError, ClientError, DecodeError, SessionExpiredError, TransportError
from .logging_utils import log_request, log_response

logger = logging.getLogger(__name__)

T = TypeVar("T")


def join_url(base_url: str, path: str) -> str:
    """Join base URL and path with exactly one slash between them"""
    return base_url.rstrip("/") + "/" + path.lstrip("/")


def encode_body(body: Any) -> Optional[bytes]:
    """Serialize a request body to JSON bytes

    The result is kept for the whole call so the 401 retry can resend it.
    """
    if body is None:
        return None
    if isinstance(body, BaseModel):
        return body.model_dump_json(exclude_none=True).encode("utf-8")
    try:
        return json.dumps(body).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise ClientError(f"failed to encode request body: {e}") from e


class ApiClient:
    """Authenticated request pipeline for the Butler Coffee API"""

    def __init__(
        self,
        base_url: str,
        credentials: CredentialState,
        http_client: Optional[httpx.Client] = None,
        on_tokens_refreshed: Optional[Callable[[CredentialState], None]] = None,
    ):
        """
        Args:
            base_url: API root, with or without trailing slash
            credentials: Token state used for (and updated by) authenticated calls
            http_client: Optional preconfigured httpx client
            on_tokens_refreshed: Called after every successful token refresh,
                typically to persist the new tokens
        """
        self.base_url = base_url
        self.credentials = credentials
        self.http = http_client or httpx.Client(
            timeout=httpx.Timeout(REQUEST_TIMEOUT, connect=CONNECT_TIMEOUT)
        )
        self.on_tokens_refreshed = on_tokens_refreshed
        self._refresh_lock = threading.Lock()

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def url_for(self, path: str) -> str:
        return join_url(self.base_url, path)

    def execute(self, method: str, path: str, body: Any = None, require_auth: bool = False) -> httpx.Response:
        """Send a request, refreshing tokens as needed

        Args:
            method: HTTP method
            path: Path relative to the base URL
            body: Optional JSON-serializable body or pydantic model
            require_auth: Whether to send the bearer token and manage its lifetime

        Returns:
            The final response (the retried one if a 401 triggered a refresh)

        Raises:
            SessionExpiredError: The access token expired and so did the refresh token
            RefreshFailedError: A preflight refresh failed
            TransportError: The request could not be sent
        """
        if require_auth and self.credentials.is_authenticated():
            self._preflight()

        url = self.url_for(path)
        content = encode_body(body)
        sent_token = self.credentials.access_token

        response = self._send(method, url, content, require_auth)

        if require_auth and response.status_code == 401 and not self.credentials.is_refresh_token_expired():
            return self._retry_after_refresh(method, url, content, response, sent_token)

        return response

    def decode(self, response: httpx.Response, model: Optional[Type[T]] = None) -> Optional[T]:
        """Decode a response into ``model`` or raise the API error it carries

        An empty 2xx body (e.g. 204 No Content) decodes to None.

        Raises:
            APIError: For any non-2xx status
            DecodeError: If a 2xx body does not validate against ``model``
        """
        body = response.content

        if 200 <= response.status_code < 300:
            if model is None or not body:
                return None
            try:
                return TypeAdapter(model).validate_json(body)
            except pydantic.ValidationError as e:
                raise DecodeError(f"failed to decode response: {e}") from e

        raise APIError(decode_error_message(body, response.status_code), status_code=response.status_code)

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        require_auth: bool = False,
        model: Optional[Type[T]] = None,
    ) -> Optional[T]:
        """``execute`` followed by ``decode``"""
        return self.decode(self.execute(method, path, body, require_auth), model)

    def _preflight(self) -> None:
        if not self.credentials.is_access_token_expired():
            return

        if self.credentials.is_refresh_token_expired():
            raise SessionExpiredError("refresh token expired, please login again")

        logger.debug("Access token expired, refreshing before request")
        with self._refresh_lock:
            # Another caller may have refreshed while we waited
            if not self.credentials.is_access_token_expired():
                return
            self._refresh()

    def _refresh(self) -> None:
        token_refresh.refresh_tokens(self.http, self.url_for(token_refresh.REFRESH_PATH), self.credentials)
        if self.on_tokens_refreshed is not None:
            self.on_tokens_refreshed(self.credentials)

    def _retry_after_refresh(
        self,
        method: str,
        url: str,
        content: Optional[bytes],
        original: httpx.Response,
        sent_token: str,
    ) -> httpx.Response:
        # A failed refresh or retry hands back the original 401 so callers
        # see one kind of authorization failure
        try:
            with self._refresh_lock:
                if self.credentials.access_token == sent_token:
                    self._refresh()
                else:
                    logger.debug("Token already rotated by another request, retrying with it")
        except ClientError as e:
            logger.debug(f"Failed to refresh token on 401: {e}")
            return original

        try:
            return self._send(method, url, content, require_auth=True)
        except TransportError as e:
            logger.debug(f"Retry request failed: {e}")
            return original

    def _send(self, method: str, url: str, content: Optional[bytes], require_auth: bool) -> httpx.Response:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if require_auth and self.credentials.access_token:
            headers["Authorization"] = f"Bearer {self.credentials.access_token}"

        log_request(method, url, headers, content)
        try:
            response = self.http.request(method, url, content=content, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"request failed: {e}") from e

        log_response(response.status_code, response.content)
        return response
