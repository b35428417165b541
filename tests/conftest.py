"""Shared fixtures: fake API transport and credential helpers."""

import datetime
import json
from typing import Callable, List

import httpx
import pytest

from api.client import ApiClient
from auth.credentials import CredentialState

BASE_URL = "https://api.test.local"


def epoch_ms(offset_seconds: float) -> str:
    """Epoch milliseconds ``offset_seconds`` from now, as the API sends them."""
    now = datetime.datetime.now(datetime.timezone.utc)
    return str(int((now + datetime.timedelta(seconds=offset_seconds)).timestamp() * 1000))


def envelope(data, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json={"meta": {"code": status_code, "message": "ok"}, "data": data})


def token_payload(access: str = "new-access", refresh: str = "new-refresh") -> dict:
    return {
        "access_token": access,
        "refresh_token": refresh,
        "expires_at": epoch_ms(3600),
        "refresh_token_expires_at": epoch_ms(86400),
    }


class RecordingHandler:
    """MockTransport handler that records requests and answers from a routing function."""

    def __init__(self, route: Callable[[httpx.Request], httpx.Response]):
        self.route = route
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.route(request)

    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]

    def json_bodies(self) -> List[dict]:
        return [json.loads(request.content) if request.content else None for request in self.requests]


@pytest.fixture
def valid_credentials() -> CredentialState:
    return CredentialState(
        access_token="old-access",
        refresh_token="old-refresh",
        access_token_expires_at=epoch_ms(3600),
        refresh_token_expires_at=epoch_ms(86400),
    )


@pytest.fixture
def make_client():
    """Build an ApiClient whose HTTP traffic goes to ``route``."""
    clients = []

    def _make(route, credentials=None, on_tokens_refreshed=None):
        handler = route if isinstance(route, RecordingHandler) else RecordingHandler(route)
        http = httpx.Client(transport=httpx.MockTransport(handler))
        client = ApiClient(
            BASE_URL,
            credentials if credentials is not None else CredentialState(),
            http_client=http,
            on_tokens_refreshed=on_tokens_refreshed,
        )
        clients.append(client)
        return client, handler

    yield _make

    for client in clients:
        client.close()
