"""
Shared Redis client for multi-process OAuth state storage.
"""
import logging
import ssl
from typing import Any

import redis

from linkedin_oauth.core.config import BaseAppSettings, settings

logger = logging.getLogger(__name__)

_client: redis.Redis | None = None


def _ssl_options(app_settings: BaseAppSettings) -> dict[str, Any]:
    options: dict[str, Any] = {}
    ssl_mode = app_settings.REDIS_SSL_CERT_REQS
    if ssl_mode:
        ssl_map = {
            "required": ssl.CERT_REQUIRED,
            "optional": ssl.CERT_OPTIONAL,
            "none": ssl.CERT_NONE,
        }
        chosen = ssl_map.get(str(ssl_mode).lower())
        if chosen is not None:
            options["ssl_cert_reqs"] = chosen
    if app_settings.REDIS_SSL_CA_CERTS:
        options["ssl_ca_certs"] = app_settings.REDIS_SSL_CA_CERTS
    return options


def get_redis_client(app_settings: BaseAppSettings | None = None) -> redis.Redis:
    """Get or create the Redis client used for OAuth state storage."""
    global _client
    if _client is not None:
        return _client

    app_settings = app_settings or settings
    if not app_settings.REDIS_URL:
        raise RuntimeError("REDIS_URL is not configured")

    _client = redis.Redis.from_url(
        app_settings.REDIS_URL,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        **_ssl_options(app_settings),
    )
    logger.info("Redis client created for OAuth state storage")
    return _client


def close_redis_client() -> None:
    """Close the shared Redis client. Called on app shutdown."""
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("Redis client closed")
