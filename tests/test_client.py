"""Tests for the authenticated request pipeline."""

import json
import threading
from typing import List

import httpx
import pytest

from api.client import ApiClient, encode_body, join_url
from api.errors import APIError, ClientError, DecodeError, SessionExpiredError, TransportError
from api.models import Envelope, Order
from auth.credentials import CredentialState
from auth.token_refresh import REFRESH_PATH
from tests.conftest import BASE_URL, RecordingHandler, envelope, epoch_ms, token_payload


class TestJoinUrl:
    """Tests for URL joining."""

    @pytest.mark.parametrize("base", ["https://x.test", "https://x.test/", "https://x.test//"])
    @pytest.mark.parametrize("path", ["api/v1", "/api/v1", "//api/v1"])
    def test_exactly_one_slash(self, base, path):
        """Should always put exactly one slash between base and path."""
        assert join_url(base, path) == "https://x.test/api/v1"


class TestEncodeBody:
    """Tests for request body encoding."""

    def test_none(self):
        """Should send no body for None."""
        assert encode_body(None) is None

    def test_dict(self):
        """Should JSON-encode plain data."""
        assert json.loads(encode_body({"a": 1})) == {"a": 1}

    def test_unserializable(self):
        """Should raise ClientError for data JSON cannot encode."""
        with pytest.raises(ClientError):
            encode_body({"a": object()})


class TestUnauthenticatedRequests:
    """Tests for requests sent without require_auth."""

    def test_no_authorization_header(self, make_client, valid_credentials):
        """Should not send the bearer token when auth is not required."""
        client, handler = make_client(lambda request: envelope([]), valid_credentials)

        client.execute("GET", "/api/core/v1/subscriptions/available")

        assert "authorization" not in handler.requests[0].headers

    def test_401_is_returned_without_refresh(self, make_client, valid_credentials):
        """Should not refresh on 401 when auth was not required."""
        client, handler = make_client(lambda request: httpx.Response(401), valid_credentials)

        response = client.execute("GET", "/api/core/v1/content/categories/")

        assert response.status_code == 401
        assert len(handler.requests) == 1


class TestPreflight:
    """Tests for the refresh performed before sending."""

    def test_session_expired_makes_no_network_call(self, make_client):
        """Should raise SessionExpiredError with zero HTTP calls when both tokens expired."""
        credentials = CredentialState(
            access_token="a",
            refresh_token="r",
            access_token_expires_at=epoch_ms(-60),
            refresh_token_expires_at=epoch_ms(-1),
        )
        client, handler = make_client(lambda request: envelope({}), credentials)

        with pytest.raises(SessionExpiredError):
            client.execute("GET", "/api/core/v1/subscriptions", require_auth=True)

        assert handler.requests == []

    def test_expired_access_token_is_refreshed_first(self, make_client):
        """Should refresh, then send the request with the new token."""
        credentials = CredentialState(
            access_token="old-access",
            refresh_token="old-refresh",
            access_token_expires_at=epoch_ms(10),
            refresh_token_expires_at=epoch_ms(86400),
        )

        def route(request):
            if request.url.path == REFRESH_PATH:
                return envelope(token_payload())
            return envelope([])

        client, handler = make_client(route, credentials)
        client.execute("GET", "/api/core/v1/subscriptions", require_auth=True)

        assert handler.paths() == [REFRESH_PATH, "/api/core/v1/subscriptions"]
        assert handler.json_bodies()[0] == {"refresh_token": "old-refresh"}
        assert "authorization" not in handler.requests[0].headers
        assert handler.requests[1].headers["authorization"] == "Bearer new-access"
        assert credentials.access_token == "new-access"
        assert credentials.refresh_token == "new-refresh"

    def test_preflight_refresh_failure_raises(self, make_client):
        """Should surface a refresh failure before the main request."""
        credentials = CredentialState(
            access_token="a",
            refresh_token="r",
            access_token_expires_at=epoch_ms(-60),
            refresh_token_expires_at=epoch_ms(3600),
        )
        client, handler = make_client(
            lambda request: httpx.Response(401, json={"detail": "invalid refresh token"}), credentials
        )

        with pytest.raises(ClientError, match="invalid refresh token"):
            client.execute("GET", "/api/core/v1/subscriptions", require_auth=True)

        assert handler.paths() == [REFRESH_PATH]

    def test_unauthenticated_gets_plain_401(self, make_client):
        """Should send without a token and return the 401 when not logged in."""
        client, handler = make_client(lambda request: httpx.Response(401))

        response = client.execute("GET", "/api/core/v1/subscriptions", require_auth=True)

        # No refresh token, so the refresh fails locally and the 401 comes back
        assert response.status_code == 401
        assert handler.paths() == ["/api/core/v1/subscriptions"]
        assert "authorization" not in handler.requests[0].headers


class TestRetryOn401:
    """Tests for the single refresh-and-retry after a 401."""

    def test_retry_succeeds_with_same_body(self, make_client, valid_credentials):
        """Should refresh once and resend the identical body with the new token."""
        calls = {"orders": 0}

        def route(request):
            if request.url.path == REFRESH_PATH:
                return envelope(token_payload())
            calls["orders"] += 1
            if calls["orders"] == 1:
                return httpx.Response(401, json={"detail": "token expired"})
            return envelope({"id": "o1", "status": "draft"})

        client, handler = make_client(route, valid_credentials)
        response = client.execute("POST", "/api/core/v1/orders/configure", body={"total_quantity": 2}, require_auth=True)

        assert response.status_code == 200
        assert handler.paths() == ["/api/core/v1/orders/configure", REFRESH_PATH, "/api/core/v1/orders/configure"]
        assert handler.requests[0].content == handler.requests[2].content
        assert handler.requests[0].headers["authorization"] == "Bearer old-access"
        assert handler.requests[2].headers["authorization"] == "Bearer new-access"

    def test_refresh_failure_returns_original_401(self, make_client, valid_credentials):
        """Should hand back the original 401 when the refresh is rejected."""
        def route(request):
            if request.url.path == REFRESH_PATH:
                return httpx.Response(400, json={"detail": "refresh token revoked"})
            return httpx.Response(401, json={"detail": "original failure"})

        client, handler = make_client(route, valid_credentials)
        response = client.execute("GET", "/api/core/v1/subscriptions", require_auth=True)

        assert response.status_code == 401
        assert response.json() == {"detail": "original failure"}
        assert handler.paths() == ["/api/core/v1/subscriptions", REFRESH_PATH]
        assert valid_credentials.access_token == "old-access"

    def test_retry_transport_failure_returns_original_401(self, make_client, valid_credentials):
        """Should hand back the original 401 when the retry cannot be sent."""
        calls = {"main": 0}

        def route(request):
            if request.url.path == REFRESH_PATH:
                return envelope(token_payload())
            calls["main"] += 1
            if calls["main"] == 1:
                return httpx.Response(401, json={"detail": "original failure"})
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = make_client(route, valid_credentials)
        response = client.execute("GET", "/api/core/v1/subscriptions", require_auth=True)

        assert response.status_code == 401
        assert response.json() == {"detail": "original failure"}
        assert valid_credentials.access_token == "new-access"

    def test_second_401_is_not_retried(self, make_client, valid_credentials):
        """Should retry at most once."""
        def route(request):
            if request.url.path == REFRESH_PATH:
                return envelope(token_payload())
            return httpx.Response(401)

        client, handler = make_client(route, valid_credentials)
        response = client.execute("GET", "/api/core/v1/subscriptions", require_auth=True)

        assert response.status_code == 401
        assert handler.paths().count(REFRESH_PATH) == 1
        assert len(handler.requests) == 3

    def test_no_retry_when_refresh_token_expired(self, make_client):
        """Should return the 401 untouched when the refresh token has expired."""
        credentials = CredentialState(
            access_token="a",
            refresh_token="r",
            access_token_expires_at=epoch_ms(3600),
            refresh_token_expires_at=epoch_ms(-1),
        )
        client, handler = make_client(lambda request: httpx.Response(401), credentials)

        response = client.execute("GET", "/api/core/v1/subscriptions", require_auth=True)

        assert response.status_code == 401
        assert len(handler.requests) == 1

    def test_callback_receives_rotated_tokens(self, make_client, valid_credentials):
        """Should call on_tokens_refreshed after a successful refresh."""
        seen: List[str] = []
        calls = {"main": 0}

        def route(request):
            if request.url.path == REFRESH_PATH:
                return envelope(token_payload(access="rotated"))
            calls["main"] += 1
            return httpx.Response(401) if calls["main"] == 1 else envelope([])

        client, _ = make_client(
            route, valid_credentials, on_tokens_refreshed=lambda creds: seen.append(creds.access_token)
        )
        client.execute("GET", "/api/core/v1/subscriptions", require_auth=True)

        assert seen == ["rotated"]


class TestTransportErrors:
    """Tests for failures below HTTP."""

    def test_connect_error(self, make_client):
        """Should wrap httpx failures in TransportError."""
        def route(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        client, _ = make_client(route)
        with pytest.raises(TransportError):
            client.execute("GET", "/api/core/v1/content/categories/")


class TestDecode:
    """Tests for response decoding."""

    def test_204_decodes_to_none(self, make_client):
        """Should return None for an empty success body."""
        client, _ = make_client(lambda request: httpx.Response(204))
        assert client.request("DELETE", "/x", model=Envelope[Order]) is None

    def test_typed_decode(self, make_client):
        """Should validate the body into the requested model."""
        client, _ = make_client(lambda request: envelope({"id": "o1", "total_quantity": "2.00"}))
        result = client.request("GET", "/x", model=Envelope[Order])
        assert result.data.id == "o1"
        assert result.data.total_quantity_value == 2.0

    def test_malformed_success_body(self, make_client):
        """Should raise DecodeError when a 2xx body is not valid."""
        client, _ = make_client(lambda request: httpx.Response(200, content=b"not json"))
        with pytest.raises(DecodeError):
            client.request("GET", "/x", model=Envelope[Order])

    def test_error_status_raises_api_error(self, make_client):
        """Should raise APIError with the decoded message and status."""
        client, _ = make_client(
            lambda request: httpx.Response(404, json={"meta": {"message": "Order not found"}})
        )
        with pytest.raises(APIError) as exc_info:
            client.request("GET", "/x", model=Envelope[Order])

        assert exc_info.value.message == "Order not found"
        assert exc_info.value.status_code == 404


class TestConcurrentRefresh:
    """Tests for refresh serialization across threads."""

    def test_single_refresh_for_concurrent_401s(self, valid_credentials):
        """Should refresh once when several requests fail with the same stale token."""
        barrier = threading.Barrier(4)
        lock = threading.Lock()
        refreshes = {"count": 0}

        def route(request):
            if request.url.path == REFRESH_PATH:
                with lock:
                    refreshes["count"] += 1
                return envelope(token_payload())
            if request.headers.get("authorization") == "Bearer old-access":
                barrier.wait(timeout=5)
                return httpx.Response(401)
            return envelope([])

        handler = RecordingHandler(route)
        client = ApiClient(BASE_URL, valid_credentials, http_client=httpx.Client(transport=httpx.MockTransport(handler)))
        statuses = []

        def worker():
            statuses.append(client.execute("GET", "/api/core/v1/subscriptions", require_auth=True).status_code)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)
        client.close()

        assert refreshes["count"] == 1
        assert statuses == [200, 200, 200, 200]
