from __future__ import annotations

import os

os.environ.setdefault("APP_ENV", "test")

from types import SimpleNamespace  # noqa: E402
from typing import Callable  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402

from linkedin_oauth.services.oauth import (  # noqa: E402
    InMemoryStateStore,
    LinkedInOAuthProvider,
    OAuthClient,
)

CLIENT_ID = "api_key"
CLIENT_SECRET = "api_secret"
CALLBACK_URI = "http://localhost"
SCOPES = ["scope_1", "scope_2"]
ACCESS_TOKEN = "abcd1234"


@pytest.fixture
def credentials():
    """Client credentials used to initialize test clients."""
    return SimpleNamespace(
        client_id=CLIENT_ID,
        client_secret=CLIENT_SECRET,
        callback_uri=CALLBACK_URI,
        scopes=SCOPES,
    )


@pytest.fixture
def provider_calls():
    """Requests seen by the mocked provider, in arrival order."""
    return []


@pytest.fixture
def make_client(provider_calls, credentials) -> Callable[..., OAuthClient]:
    """Build an OAuthClient whose provider traffic goes to ``handler``.

    The handler receives each ``httpx.Request`` and returns an ``httpx.Response``
    (or raises an ``httpx`` exception to simulate a network failure).
    """

    def factory(handler=None, *, initialized: bool = True, state_store=None) -> OAuthClient:
        def record(request: httpx.Request) -> httpx.Response:
            provider_calls.append(request)
            if handler is None:
                raise AssertionError(f"Unexpected provider request: {request.method} {request.url}")
            return handler(request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(record))
        provider = LinkedInOAuthProvider(http_client=http_client)
        client = OAuthClient(provider, state_store or InMemoryStateStore())
        if initialized:
            client.init(
                credentials.client_id,
                credentials.client_secret,
                credentials.callback_uri,
                credentials.scopes,
            )
        return client

    return factory


@pytest.fixture
def json_responder():
    """Factory for handlers that answer every request with the same JSON body."""

    def build(payload, status_code: int = 200):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, json=payload)

        return handler

    return build
