"""Factory function for creating a configured OAuth client."""
import logging

import httpx

from linkedin_oauth.core.config import BaseAppSettings, settings

from .providers import LinkedInOAuthProvider
from .service import OAuthClient
from .state_store import InMemoryStateStore, RedisStateStore, StateStore

logger = logging.getLogger(__name__)


def create_state_store(app_settings: BaseAppSettings | None = None) -> StateStore:
    """Build the CSRF state store selected by ``OAUTH_STATE_BACKEND``."""
    app_settings = app_settings or settings
    if app_settings.OAUTH_STATE_BACKEND == "redis":
        from linkedin_oauth.core.redis_client import get_redis_client

        logger.info("Using Redis OAuth state store")
        return RedisStateStore(get_redis_client(app_settings), ttl_seconds=app_settings.OAUTH_STATE_TTL_SECONDS)
    return InMemoryStateStore(ttl_seconds=app_settings.OAUTH_STATE_TTL_SECONDS)


def create_oauth_client(
    app_settings: BaseAppSettings | None = None,
    http_client: httpx.AsyncClient | None = None,
    state_store: StateStore | None = None,
) -> OAuthClient:
    """
    Factory function to create a configured OAuth client.

    Initializes LinkedIn credentials when they are present in settings; an
    unconfigured client is still returned and raises ``NotInitializedError``
    from every operation until ``init`` is called.

    Args:
        app_settings: Settings to read (defaults to the process settings)
        http_client: Optional shared HTTP client for provider calls
        state_store: Optional state store overriding the configured backend

    Returns:
        OAuthClient instance
    """
    app_settings = app_settings or settings
    provider = LinkedInOAuthProvider(
        auth_base_url=app_settings.LINKEDIN_AUTH_BASE_URL,
        api_base_url=app_settings.LINKEDIN_API_BASE_URL,
        http_client=http_client,
        timeout=app_settings.HTTP_TIMEOUT_SECONDS,
    )
    client = OAuthClient(provider, state_store or create_state_store(app_settings))

    if app_settings.linkedin_configured:
        client.init(
            client_id=app_settings.LINKEDIN_CLIENT_ID,
            client_secret=app_settings.LINKEDIN_CLIENT_SECRET,
            callback_uri=app_settings.LINKEDIN_CALLBACK_URL,
            scopes=app_settings.LINKEDIN_SCOPES,
        )
        logger.info("LinkedIn OAuth provider enabled")
    else:
        logger.warning("LinkedIn OAuth not configured (missing client ID/secret)")

    return client
