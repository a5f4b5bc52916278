"""OAuth client coordinating the LinkedIn authorization code flow.

Responsibilities:
- Hold the client credentials and the CSRF state store
- Start the flow (state issue + authorization URL)
- Complete the flow (state consume + code exchange)
- Fetch normalized profile and work history for an access token
"""
from __future__ import annotations

import logging
import threading
from typing import Sequence

from pydantic import ValidationError

from linkedin_oauth.core.exceptions import (
    CSRFStateMismatchError,
    InvalidConfigError,
    NotInitializedError,
)
from linkedin_oauth.models.schemas import CredentialConfig, Position, UserProfile

from .providers import OAuthProvider
from .state_store import InMemoryStateStore, StateStore

logger = logging.getLogger(__name__)


class OAuthClient:
    """
    Explicit client object for one OAuth provider.

    Credentials are replaced as a whole by ``init``; every operation reads the
    current ``CredentialConfig`` reference once and works on that snapshot.
    """

    def __init__(self, provider: OAuthProvider, state_store: StateStore | None = None):
        """
        Initialize OAuth client.

        Args:
            provider: Provider endpoints and payload decoding
            state_store: CSRF state store (in-memory, no expiry when omitted)
        """
        self.provider = provider
        self.state_store = state_store if state_store is not None else InMemoryStateStore()
        self._config: CredentialConfig | None = None
        self._init_lock = threading.Lock()

    @property
    def config(self) -> CredentialConfig | None:
        return self._config

    @property
    def is_initialized(self) -> bool:
        return self._config is not None

    def init(
        self,
        client_id: str,
        client_secret: str,
        callback_uri: str,
        scopes: Sequence[str],
    ) -> CredentialConfig:
        """
        Configure (or atomically reconfigure) client credentials.

        Raises:
            InvalidConfigError: If the callback URI is not an absolute URI
        """
        try:
            config = CredentialConfig(
                client_id=client_id,
                client_secret=client_secret,
                callback_uri=callback_uri,
                scopes=tuple(scopes),
            )
        except ValidationError as e:
            first = e.errors()[0]
            field = str(first["loc"][0]) if first["loc"] else None
            raise InvalidConfigError(first["msg"], field=field) from e

        with self._init_lock:
            self._config = config
        logger.info(f"OAuth client initialized | client_id={client_id} scopes={len(config.scopes)}")
        return config

    def _require_config(self) -> CredentialConfig:
        config = self._config
        if config is None:
            raise NotInitializedError()
        return config

    def build_authorization_url(self, state: str) -> str:
        """Authorization URL for an already issued state token."""
        return self.provider.get_authorization_url(self._config, state)

    def start_auth(self) -> str:
        """
        Begin an authorization attempt.

        Returns:
            URL the user agent should be redirected to (302)

        Raises:
            NotInitializedError: If credentials are not configured
        """
        config = self._require_config()
        state = self.state_store.issue()
        logger.info("Initiating LinkedIn OAuth login")
        return self.provider.get_authorization_url(config, state)

    async def complete_auth(self, code: str, state: str, timeout: float | None = None) -> str:
        """
        Finish an authorization attempt and return the access token.

        The state is validated and consumed before any request reaches the
        token endpoint.

        Raises:
            NotInitializedError: If credentials are not configured
            CSRFStateMismatchError: If the state is unknown, expired or reused
            ProviderResponseError: If the token exchange fails
        """
        config = self._require_config()
        if not self.state_store.validate_and_consume(state):
            logger.warning("Invalid or consumed OAuth state on callback")
            raise CSRFStateMismatchError()
        return await self.provider.exchange_code_for_token(config, code, timeout=timeout)

    async def get_user(self, access_token: str, timeout: float | None = None) -> UserProfile:
        """Fetch the authenticated member's profile."""
        self._require_config()
        return await self.provider.get_user_info(access_token, timeout=timeout)

    async def get_work_history(self, access_token: str, timeout: float | None = None) -> list[Position]:
        """Fetch the authenticated member's positions, in provider order."""
        self._require_config()
        return await self.provider.get_positions(access_token, timeout=timeout)
