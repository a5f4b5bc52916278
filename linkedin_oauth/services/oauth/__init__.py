"""LinkedIn OAuth 2.0 client module.

Authorization code flow with single-use CSRF state tokens, code-for-token
exchange, and strict normalization of profile and work-history responses.
"""
from linkedin_oauth.core.exceptions import (
    AuthorizationDeniedError,
    CSRFStateMismatchError,
    IncompleteProfileError,
    InvalidConfigError,
    InvalidJSONError,
    MalformedTokenResponseError,
    MalformedWorkHistoryError,
    MissingAuthorizationCodeError,
    NotInitializedError,
    OAuthClientError,
    ProviderResponseError,
    StateStoreUnavailableError,
    TransportError,
)

from .factory import create_oauth_client, create_state_store
from .providers import (
    LinkedInOAuthProvider,
    OAuthProvider,
)
from .service import OAuthClient
from .state_store import InMemoryStateStore, RedisStateStore, StateStore

__all__ = [
    # Exceptions
    "OAuthClientError",
    "NotInitializedError",
    "InvalidConfigError",
    "CSRFStateMismatchError",
    "AuthorizationDeniedError",
    "MissingAuthorizationCodeError",
    "StateStoreUnavailableError",
    "ProviderResponseError",
    "TransportError",
    "InvalidJSONError",
    "MalformedTokenResponseError",
    "IncompleteProfileError",
    "MalformedWorkHistoryError",
    # State
    "StateStore",
    "InMemoryStateStore",
    "RedisStateStore",
    # Providers
    "OAuthProvider",
    "LinkedInOAuthProvider",
    # Client
    "OAuthClient",
    # Factory
    "create_oauth_client",
    "create_state_store",
]
