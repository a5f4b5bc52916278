"""LinkedIn OAuth 2.0 implementation (v1 People API)."""
from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from linkedin_oauth.core.exceptions import (
    IncompleteProfileError,
    MalformedTokenResponseError,
    MalformedWorkHistoryError,
)
from linkedin_oauth.models.schemas import (
    Position,
    ProfilePayload,
    TokenErrorPayload,
    TokenPayload,
    UserProfile,
    WorkHistoryPayload,
)

from .base import DEFAULT_TIMEOUT_SECONDS, OAuthProvider

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ["firstName", "lastName", "id"]


def _describe_errors(exc: ValidationError) -> list[str]:
    return [f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}" for err in exc.errors()]


class LinkedInOAuthProvider(OAuthProvider):
    """LinkedIn OAuth 2.0 implementation."""

    def __init__(
        self,
        auth_base_url: str = "https://www.linkedin.com",
        api_base_url: str = "https://api.linkedin.com",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        super().__init__(http_client=http_client, timeout=timeout)
        self.auth_base_url = auth_base_url.rstrip("/")
        self.api_base_url = api_base_url.rstrip("/")

    @property
    def authorization_url(self) -> str:
        return f"{self.auth_base_url}/uas/oauth2/authorization"

    @property
    def token_url(self) -> str:
        return f"{self.auth_base_url}/uas/oauth2/accessToken"

    @property
    def user_info_url(self) -> str:
        return f"{self.api_base_url}/v1/people/~"

    @property
    def positions_url(self) -> str:
        return f"{self.api_base_url}/v1/people/~:(positions)"

    def authorize_request(self, access_token: str) -> tuple[dict[str, str], dict[str, str]]:
        # v1 API takes the token as a query parameter rather than a Bearer header
        return {"oauth2_access_token": access_token, "format": "json"}, {}

    def extract_access_token(self, token_response: Any) -> str:
        if not isinstance(token_response, dict):
            raise MalformedTokenResponseError()
        try:
            return TokenPayload.model_validate(token_response).access_token
        except ValidationError:
            error = TokenErrorPayload.model_validate(
                {k: v for k, v in token_response.items() if k in ("error", "error_description") and isinstance(v, str)}
            )
            logger.error(f"Token response without access_token | provider_error={error.error}")
            raise MalformedTokenResponseError(error.error, error.error_description) from None

    def extract_user_data(self, user_info: Any) -> UserProfile:
        """
        Extract user data from LinkedIn profile response.

        Expected fields:
        - firstName: Given name
        - lastName: Family name
        - id: LinkedIn member id
        """
        if not isinstance(user_info, dict):
            raise IncompleteProfileError(PROFILE_FIELDS)
        try:
            return ProfilePayload.model_validate(user_info).to_profile()
        except ValidationError as e:
            fields = {str(err["loc"][0]) for err in e.errors() if err["loc"]}
            missing = [name for name in PROFILE_FIELDS if name in fields]
            logger.warning(f"Incomplete LinkedIn profile | missing={missing}")
            raise IncompleteProfileError(missing or PROFILE_FIELDS) from None

    def extract_positions(self, positions_response: Any) -> list[Position]:
        """
        Extract work history from LinkedIn positions response.

        Expected shape:
        {"positions": {"values": [{"company": {"name"}, "title",
          "startDate": {"year", "month"}, "endDate": {"year", "month"}}]}}
        """
        if not isinstance(positions_response, dict):
            raise MalformedWorkHistoryError(["<root>: expected a JSON object"])
        try:
            payload = WorkHistoryPayload.model_validate(positions_response)
        except ValidationError as e:
            errors = _describe_errors(e)
            logger.warning(f"Malformed LinkedIn work history | errors={len(errors)}")
            raise MalformedWorkHistoryError(errors) from None
        return [entry.to_position() for entry in payload.positions.values]
