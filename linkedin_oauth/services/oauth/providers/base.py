"""Abstract base class for OAuth 2.0 providers.

Implements the OAuth 2.0 authorization code flow and the HTTP/JSON plumbing
shared by every provider call. Subclasses supply endpoints and the strict
decoding of provider payloads into domain models.
"""
from __future__ import annotations

import hashlib
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import quote, urlencode

import httpx

from linkedin_oauth.core.exceptions import (
    InvalidJSONError,
    NotInitializedError,
    TransportError,
)
from linkedin_oauth.models.schemas import CredentialConfig, Position, UserProfile

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


def _code_hash(code: str) -> str:
    """Short, stable fingerprint of an authorization code for log correlation."""
    return hashlib.sha256(code.encode()).hexdigest()[:12]


class OAuthProvider(ABC):
    """
    Abstract base class for OAuth 2.0 providers.

    Holds no client credentials: every call receives the current
    ``CredentialConfig`` so the owning client can swap it atomically.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize OAuth provider.

        Args:
            http_client: Shared client to send requests through. When omitted,
                each call opens and closes its own ``httpx.AsyncClient``.
            timeout: Default per-request timeout in seconds
        """
        self._http_client = http_client
        self.timeout = timeout

    @property
    @abstractmethod
    def authorization_url(self) -> str:
        """Provider's authorization endpoint."""
        pass

    @property
    @abstractmethod
    def token_url(self) -> str:
        """Provider's token exchange endpoint."""
        pass

    @property
    @abstractmethod
    def user_info_url(self) -> str:
        """Provider's profile endpoint."""
        pass

    @property
    @abstractmethod
    def positions_url(self) -> str:
        """Provider's work-history endpoint."""
        pass

    def get_authorization_url(self, config: CredentialConfig | None, state: str) -> str:
        """
        Generate authorization URL for OAuth flow.

        Args:
            config: Client credentials; ``None`` means the client was never initialized
            state: CSRF protection token

        Returns:
            Full authorization URL with query parameters

        Raises:
            NotInitializedError: If no credentials are configured
        """
        if config is None:
            raise NotInitializedError()

        params = {
            "response_type": "code",
            "client_id": config.client_id,
            "redirect_uri": config.callback_uri,
            "state": state,
            "scope": " ".join(config.scopes),
        }
        # quote (not quote_plus) so scope separators go out as %20
        return f"{self.authorization_url}?{urlencode(params, safe='', quote_via=quote)}"

    def authorize_request(self, access_token: str) -> tuple[dict[str, str], dict[str, str]]:
        """Return ``(params, headers)`` that authenticate an API call."""
        return {}, {"Authorization": f"Bearer {access_token}"}

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        endpoint: str,
        params: dict[str, str],
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """
        Send one request and decode its JSON body.

        Non-2xx answers with a JSON body are returned for the caller to decode;
        non-2xx answers without one become ``TransportError``.

        Raises:
            TransportError: Connection failure, timeout, or unusable error response
            InvalidJSONError: 2xx response whose body is not JSON
        """
        effective_timeout = timeout if timeout is not None else self.timeout
        async with self._client() as client:
            try:
                if method == "POST":
                    response = await client.post(
                        url, params=params, headers=headers, content=b"", timeout=effective_timeout
                    )
                else:
                    response = await client.get(url, params=params, headers=headers, timeout=effective_timeout)
            except httpx.RequestError as e:
                logger.error(f"{endpoint} request failed: {e.__class__.__name__}: {e}")
                raise TransportError(f"Failed to connect to OAuth provider ({endpoint})") from e

        try:
            payload = response.json()
        except ValueError as e:
            if response.is_error:
                logger.error(f"{endpoint} failed | status={response.status_code} body_length={len(response.content)}")
                raise TransportError(
                    f"{endpoint} failed: {response.status_code}", status=response.status_code
                ) from e
            logger.error(f"{endpoint} returned a non-JSON body | status={response.status_code}")
            raise InvalidJSONError(endpoint) from e

        if response.is_error:
            logger.warning(f"{endpoint} returned status {response.status_code} with a JSON body")
        return payload

    async def exchange_code_for_token(
        self,
        config: CredentialConfig,
        code: str,
        timeout: float | None = None,
    ) -> str:
        """
        Exchange authorization code for access token.

        Args:
            config: Client credentials
            code: Authorization code from OAuth callback
            timeout: Optional per-call timeout override in seconds

        Returns:
            The bare access token string

        Raises:
            TransportError: If the provider cannot be reached
            InvalidJSONError: If the response body is not JSON
            MalformedTokenResponseError: If no usable access_token is present
        """
        params = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": config.callback_uri,
            "client_id": config.client_id,
            "client_secret": config.client_secret,
        }

        # Log sanitized exchange metadata (no secrets)
        code_hash = _code_hash(code)
        logger.info(
            f"Token exchange attempt | "
            f"code_hash={code_hash} "
            f"client_id={config.client_id} "
            f"redirect_uri={config.callback_uri}"
        )

        payload = await self._request_json(
            "POST",
            self.token_url,
            endpoint="token exchange",
            params=params,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )
        access_token = self.extract_access_token(payload)
        logger.info(f"Token exchange SUCCESS | code_hash={code_hash}")
        return access_token

    async def get_user_info(self, access_token: str, timeout: float | None = None) -> UserProfile:
        """
        Fetch and normalize the authenticated user's profile.

        Raises:
            TransportError: If the provider cannot be reached
            InvalidJSONError: If the response body is not JSON
            IncompleteProfileError: If any identity field is missing or empty
        """
        params, headers = self.authorize_request(access_token)
        payload = await self._request_json(
            "GET", self.user_info_url, endpoint="profile fetch", params=params, headers=headers, timeout=timeout
        )
        return self.extract_user_data(payload)

    async def get_positions(self, access_token: str, timeout: float | None = None) -> list[Position]:
        """
        Fetch and normalize the authenticated user's work history.

        Raises:
            TransportError: If the provider cannot be reached
            InvalidJSONError: If the response body is not JSON
            MalformedWorkHistoryError: If any entry or nesting level is malformed
        """
        params, headers = self.authorize_request(access_token)
        payload = await self._request_json(
            "GET", self.positions_url, endpoint="work history fetch", params=params, headers=headers, timeout=timeout
        )
        return self.extract_positions(payload)

    @abstractmethod
    def extract_access_token(self, token_response: Any) -> str:
        """Pull the access token out of a decoded token response."""
        pass

    @abstractmethod
    def extract_user_data(self, user_info: Any) -> UserProfile:
        """Decode a profile response into a ``UserProfile``."""
        pass

    @abstractmethod
    def extract_positions(self, positions_response: Any) -> list[Position]:
        """Decode a work-history response into ordered ``Position`` values."""
        pass
