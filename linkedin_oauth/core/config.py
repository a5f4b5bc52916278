from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "linkedin-oauth"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"

    # LinkedIn OAuth 2.0 client credentials
    LINKEDIN_CLIENT_ID: str | None = None
    LINKEDIN_CLIENT_SECRET: str | None = None
    LINKEDIN_CALLBACK_URL: str = "http://localhost:8000/auth/linkedin/callback"
    LINKEDIN_SCOPES: list[str] = ["r_basicprofile"]

    # Provider endpoints (overridable for sandboxes and tests)
    LINKEDIN_AUTH_BASE_URL: str = "https://www.linkedin.com"
    LINKEDIN_API_BASE_URL: str = "https://api.linkedin.com"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # CSRF state storage
    OAUTH_STATE_BACKEND: Literal["memory", "redis"] = "memory"
    OAUTH_STATE_TTL_SECONDS: int | None = 600  # None keeps pending states until consumed
    REDIS_URL: str | None = None
    REDIS_SSL_CERT_REQS: str | None = None
    REDIS_SSL_CA_CERTS: str | None = None

    @property
    def linkedin_configured(self) -> bool:
        return bool(self.LINKEDIN_CLIENT_ID and self.LINKEDIN_CLIENT_SECRET)

    @model_validator(mode="after")
    def _validate_required_fields(self) -> BaseAppSettings:
        if self.OAUTH_STATE_TTL_SECONDS is not None and self.OAUTH_STATE_TTL_SECONDS <= 0:
            raise ValueError("OAUTH_STATE_TTL_SECONDS must be positive when set")

        if self.ENV.lower() == "prod":
            required_in_prod = ("LINKEDIN_CLIENT_ID", "LINKEDIN_CLIENT_SECRET", "LINKEDIN_CALLBACK_URL")
            missing = [name for name in required_in_prod if not getattr(self, name)]
            if self.OAUTH_STATE_BACKEND == "redis" and not self.REDIS_URL:
                missing.append("REDIS_URL")
            if missing:
                raise ValueError(f"Missing required production settings: {', '.join(missing)}")
            if self.LINKEDIN_CALLBACK_URL.startswith("http://localhost"):
                raise ValueError("LINKEDIN_CALLBACK_URL points at localhost in production")
        return self


class DevSettings(BaseAppSettings):
    ENV: str = "dev"


class TestSettings(BaseAppSettings):
    ENV: str = "test"
    LINKEDIN_CLIENT_ID: str | None = "test-client-id"
    LINKEDIN_CLIENT_SECRET: str | None = "test-client-secret"
    LINKEDIN_CALLBACK_URL: str = "http://localhost/callback"
    LINKEDIN_SCOPES: list[str] = ["scope_1", "scope_2"]


class ProdSettings(BaseAppSettings):
    ENV: str = "prod"
    LOG_FORMAT: str = "json"


_ENV_TO_SETTINGS: dict[str, type[BaseAppSettings]] = {
    "dev": DevSettings,
    "development": DevSettings,
    "test": TestSettings,
    "testing": TestSettings,
    "prod": ProdSettings,
    "production": ProdSettings,
}


@lru_cache
def get_settings() -> BaseAppSettings:
    env_name = os.getenv("APP_ENV") or os.getenv("ENV") or "dev"
    env = env_name.lower()
    settings_cls = _ENV_TO_SETTINGS.get(env, DevSettings)
    return settings_cls()


settings = get_settings()
