"""Tests for the OAuth client: initialization, authorization redirect and token exchange."""
from unittest.mock import AsyncMock, Mock, patch
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
from pydantic import ValidationError

from linkedin_oauth.core.exceptions import (
    CSRFStateMismatchError,
    InvalidConfigError,
    InvalidJSONError,
    MalformedTokenResponseError,
    NotInitializedError,
    TransportError,
)
from linkedin_oauth.services.oauth import LinkedInOAuthProvider, OAuthClient


def _query(url: str) -> dict[str, list[str]]:
    return parse_qs(urlsplit(url).query)


# ========== Initialization ==========

class TestInit:
    def test_init_stores_immutable_config(self, make_client, credentials):
        client = make_client()

        assert client.is_initialized
        assert client.config.client_id == credentials.client_id
        assert client.config.scopes == ("scope_1", "scope_2")
        with pytest.raises(ValidationError):
            client.config.client_id = "other"

    def test_init_rejects_relative_callback_uri(self, make_client):
        client = make_client(initialized=False)

        with pytest.raises(InvalidConfigError) as exc_info:
            client.init("id", "secret", "/relative/callback", ["scope"])

        assert exc_info.value.code == "CFG002"
        assert exc_info.value.details == {"field": "callback_uri"}
        assert not client.is_initialized

    def test_init_rejects_unparseable_callback_uri(self, make_client):
        client = make_client(initialized=False)

        with pytest.raises(InvalidConfigError):
            client.init("id", "secret", "http://[::1", ["scope"])

    def test_failed_reinit_keeps_previous_config(self, make_client):
        client = make_client()
        previous = client.config

        with pytest.raises(InvalidConfigError):
            client.init("id2", "secret2", "not a uri", [])

        assert client.config is previous

    def test_reinit_replaces_whole_config(self, make_client):
        client = make_client()
        client.init("new-id", "new-secret", "https://example.com/cb", ["r_fullprofile"])

        query = _query(client.start_auth())
        assert query["client_id"] == ["new-id"]
        assert query["redirect_uri"] == ["https://example.com/cb"]
        assert query["scope"] == ["r_fullprofile"]


# ========== Authorization redirect ==========

class TestAuthorizationUrl:
    def test_start_auth_url_echoes_config(self, make_client, credentials):
        client = make_client()

        url = client.start_auth()
        parts = urlsplit(url)
        query = _query(url)

        assert parts.scheme == "https"
        assert parts.netloc == "www.linkedin.com"
        assert parts.path == "/uas/oauth2/authorization"
        assert query["response_type"] == ["code"]
        assert query["client_id"] == [credentials.client_id]
        assert query["redirect_uri"] == [credentials.callback_uri]
        assert query["scope"] == [" ".join(credentials.scopes)]
        assert len(query["state"][0]) == 16

    def test_scopes_are_joined_with_percent_20(self, make_client):
        url = make_client().start_auth()
        assert "scope=scope_1%20scope_2" in url

    def test_start_auth_issues_a_fresh_state_each_time(self, make_client):
        client = make_client()
        first = _query(client.start_auth())["state"][0]
        second = _query(client.start_auth())["state"][0]

        assert first != second
        assert client.state_store.validate_and_consume(first) is True
        assert client.state_store.validate_and_consume(second) is True

    def test_build_authorization_url_is_deterministic(self, make_client):
        client = make_client()
        assert client.build_authorization_url("fixedState123456") == client.build_authorization_url(
            "fixedState123456"
        )

    def test_build_authorization_url_requires_init(self, make_client):
        client = make_client(initialized=False)
        with pytest.raises(NotInitializedError):
            client.build_authorization_url("fixedState123456")

    def test_provider_rejects_missing_config(self):
        with pytest.raises(NotInitializedError):
            LinkedInOAuthProvider().get_authorization_url(None, "state")

    def test_start_auth_requires_init_and_issues_no_state(self, make_client):
        client = make_client(initialized=False)

        with pytest.raises(NotInitializedError) as exc_info:
            client.start_auth()

        assert exc_info.value.code == "CFG001"
        assert len(client.state_store) == 0


# ========== Token exchange ==========

class TestCompleteAuth:
    @pytest.mark.asyncio
    async def test_complete_auth_returns_access_token(self, make_client, json_responder):
        client = make_client(json_responder({"access_token": "abcd1234", "expires_in": 5184000}))
        state = _query(client.start_auth())["state"][0]

        token = await client.complete_auth("blah", state)

        assert token == "abcd1234"

    @pytest.mark.asyncio
    async def test_token_request_carries_query_parameters(self, make_client, json_responder, provider_calls, credentials):
        client = make_client(json_responder({"access_token": "abcd1234"}))
        state = _query(client.start_auth())["state"][0]

        await client.complete_auth("auth-code", state)

        assert len(provider_calls) == 1
        request = provider_calls[0]
        assert request.method == "POST"
        assert request.url.host == "www.linkedin.com"
        assert request.url.path == "/uas/oauth2/accessToken"
        assert dict(request.url.params) == {
            "grant_type": "authorization_code",
            "code": "auth-code",
            "redirect_uri": credentials.callback_uri,
            "client_id": credentials.client_id,
            "client_secret": credentials.client_secret,
        }
        assert request.headers["content-type"] == "application/json"
        assert request.content == b""

    @pytest.mark.asyncio
    async def test_unknown_state_fails_before_any_request(self, make_client, json_responder, provider_calls):
        client = make_client(json_responder({"access_token": "abcd1234"}))
        client.start_auth()

        with pytest.raises(CSRFStateMismatchError) as exc_info:
            await client.complete_auth("blah", "forgedState12345")

        assert exc_info.value.code == "AUTH001"
        assert provider_calls == []

    @pytest.mark.asyncio
    async def test_state_cannot_be_replayed(self, make_client, json_responder, provider_calls):
        client = make_client(json_responder({"access_token": "abcd1234"}))
        state = _query(client.start_auth())["state"][0]

        await client.complete_auth("blah", state)
        with pytest.raises(CSRFStateMismatchError):
            await client.complete_auth("blah", state)

        assert len(provider_calls) == 1

    @pytest.mark.asyncio
    async def test_complete_auth_requires_init(self, make_client):
        client = make_client(initialized=False)
        with pytest.raises(NotInitializedError):
            await client.complete_auth("blah", "state")

    @pytest.mark.asyncio
    async def test_missing_access_token_is_malformed(self, make_client, json_responder):
        client = make_client(json_responder({"expires_in": 5184000}))
        state = _query(client.start_auth())["state"][0]

        with pytest.raises(MalformedTokenResponseError) as exc_info:
            await client.complete_auth("blah", state)

        assert exc_info.value.code == "PRV003"

    @pytest.mark.asyncio
    async def test_non_string_access_token_is_malformed(self, make_client, json_responder):
        client = make_client(json_responder({"access_token": 12345}))
        state = _query(client.start_auth())["state"][0]

        with pytest.raises(MalformedTokenResponseError):
            await client.complete_auth("blah", state)

    @pytest.mark.asyncio
    async def test_non_object_body_is_malformed(self, make_client, json_responder):
        client = make_client(json_responder(["abcd1234"]))
        state = _query(client.start_auth())["state"][0]

        with pytest.raises(MalformedTokenResponseError):
            await client.complete_auth("blah", state)

    @pytest.mark.asyncio
    async def test_provider_error_payload_is_reported(self, make_client, json_responder):
        client = make_client(
            json_responder(
                {"error": "invalid_grant", "error_description": "authorization code expired"},
                status_code=400,
            )
        )
        state = _query(client.start_auth())["state"][0]

        with pytest.raises(MalformedTokenResponseError) as exc_info:
            await client.complete_auth("stale", state)

        assert exc_info.value.details == {
            "provider_error": "invalid_grant",
            "provider_error_description": "authorization code expired",
        }

    @pytest.mark.asyncio
    async def test_error_status_without_json_is_transport_error(self, make_client):
        client = make_client(lambda request: httpx.Response(503, text="Service Unavailable"))
        state = _query(client.start_auth())["state"][0]

        with pytest.raises(TransportError) as exc_info:
            await client.complete_auth("blah", state)

        assert exc_info.value.details == {"provider_status": 503}

    @pytest.mark.asyncio
    async def test_success_status_without_json_is_invalid_json(self, make_client):
        client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
        state = _query(client.start_auth())["state"][0]

        with pytest.raises(InvalidJSONError):
            await client.complete_auth("blah", state)

    @pytest.mark.asyncio
    async def test_connection_failure_is_transport_error(self, make_client):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(refuse)
        state = _query(client.start_auth())["state"][0]

        with pytest.raises(TransportError) as exc_info:
            await client.complete_auth("blah", state)

        assert exc_info.value.code == "PRV001"
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_state_is_consumed_even_when_exchange_fails(self, make_client):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(refuse)
        state = _query(client.start_auth())["state"][0]

        with pytest.raises(TransportError):
            await client.complete_auth("blah", state)
        with pytest.raises(CSRFStateMismatchError):
            await client.complete_auth("blah", state)


# ========== Per-call HTTP client ==========

@pytest.mark.asyncio
async def test_exchange_opens_its_own_client_when_none_is_shared(credentials):
    """Without a shared client, the provider opens one per call with its timeout."""
    client = OAuthClient(LinkedInOAuthProvider(timeout=3.0))
    client.init(credentials.client_id, credentials.client_secret, credentials.callback_uri, credentials.scopes)
    state = _query(client.start_auth())["state"][0]

    mock_response = Mock()
    mock_response.json.return_value = {"access_token": "abcd1234"}
    mock_response.is_error = False

    with patch("httpx.AsyncClient") as mock_client:
        mock_post = AsyncMock(return_value=mock_response)
        mock_client.return_value.__aenter__.return_value.post = mock_post

        token = await client.complete_auth("blah", state, timeout=1.5)

    assert token == "abcd1234"
    mock_client.assert_called_once_with(timeout=3.0)
    assert mock_post.call_args.kwargs["timeout"] == 1.5
    assert mock_post.call_args.kwargs["params"]["code"] == "blah"


@pytest.mark.asyncio
async def test_timeout_is_transport_error(credentials):
    client = OAuthClient(LinkedInOAuthProvider())
    client.init(credentials.client_id, credentials.client_secret, credentials.callback_uri, credentials.scopes)
    state = _query(client.start_auth())["state"][0]

    with patch("httpx.AsyncClient") as mock_client:
        mock_client.return_value.__aenter__.return_value.post = AsyncMock(
            side_effect=httpx.ReadTimeout("timed out")
        )

        with pytest.raises(TransportError):
            await client.complete_auth("blah", state)
