"""Exception hierarchy for the LinkedIn OAuth client.

Every failure is raised to the immediate caller as a typed exception; nothing
here is retried or recovered internally.

Error codes follow pattern: [CATEGORY][NUMBER]
- CFG: Client configuration errors
- AUTH: Authorization flow errors
- STO: CSRF state store errors
- PRV: Provider communication and response errors
"""

from __future__ import annotations

from typing import Any


class OAuthClientError(Exception):
    """Base exception for all OAuth client errors.

    Carries a stable error code and a suggested HTTP status so a hosting
    application can map failures without inspecting messages.
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        """Initialize exception with message and metadata.

        Args:
            message: Human-readable error message
            code: Unique error code (e.g., "AUTH001")
            status_code: Suggested HTTP status code
            details: Optional additional context
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


# ============================================================================
# CONFIGURATION ERRORS (CFG001-099)
# ============================================================================

class NotInitializedError(OAuthClientError):
    """Client credentials have not been configured yet."""

    def __init__(self):
        super().__init__(
            message="OAuth client has not been initialized",
            code="CFG001",
            status_code=503,
        )


class InvalidConfigError(OAuthClientError):
    """Client credentials were rejected at initialization."""

    def __init__(self, reason: str, field: str | None = None):
        super().__init__(
            message=f"Invalid OAuth client configuration: {reason}",
            code="CFG002",
            status_code=500,
            details={"field": field} if field else {},
        )


# ============================================================================
# AUTHORIZATION FLOW ERRORS (AUTH001-099)
# ============================================================================

class CSRFStateMismatchError(OAuthClientError):
    """Callback state is unknown, expired or already consumed."""

    def __init__(self):
        super().__init__(
            message="State mismatch. Possible CSRF attack or expired session.",
            code="AUTH001",
            status_code=400,
        )


class AuthorizationDeniedError(OAuthClientError):
    """Provider redirected back with an error instead of a code."""

    def __init__(self, provider_error: str, description: str | None = None):
        details: dict[str, Any] = {"provider_error": provider_error}
        if description:
            details["provider_error_description"] = description
        super().__init__(
            message=description or f"Authorization was declined: {provider_error}",
            code="AUTH002",
            status_code=400,
            details=details,
        )


class MissingAuthorizationCodeError(OAuthClientError):
    """Callback carried neither a code nor a provider error."""

    def __init__(self):
        super().__init__(
            message="Missing authorization code",
            code="AUTH003",
            status_code=400,
        )


# ============================================================================
# STATE STORE ERRORS (STO001-099)
# ============================================================================

class StateStoreUnavailableError(OAuthClientError):
    """State tokens could not be issued or consumed by the backing store."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"OAuth state store unavailable: {reason}",
            code="STO001",
            status_code=503,
        )


# ============================================================================
# PROVIDER ERRORS (PRV001-099)
# ============================================================================

class ProviderResponseError(OAuthClientError):
    """Base class for failures talking to, or decoding answers from, the provider."""
    pass


class TransportError(ProviderResponseError):
    """Provider could not be reached or answered with an unusable error response."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(
            message=message,
            code="PRV001",
            status_code=502,
            details={"provider_status": status} if status is not None else {},
        )


class InvalidJSONError(ProviderResponseError):
    """Provider response body is not valid JSON."""

    def __init__(self, endpoint: str):
        super().__init__(
            message=f"Provider returned a body that is not valid JSON ({endpoint})",
            code="PRV002",
            status_code=502,
            details={"endpoint": endpoint},
        )


class MalformedTokenResponseError(ProviderResponseError):
    """Token endpoint answered without a usable access_token."""

    def __init__(self, provider_error: str | None = None, description: str | None = None):
        details: dict[str, Any] = {}
        if provider_error:
            details["provider_error"] = provider_error
        if description:
            details["provider_error_description"] = description
        super().__init__(
            message="Unable to parse access_token from provider response",
            code="PRV003",
            status_code=502,
            details=details,
        )


class IncompleteProfileError(ProviderResponseError):
    """Profile response is missing one or more required identity fields."""

    def __init__(self, fields: list[str]):
        super().__init__(
            message=f"Profile response is missing required fields: {', '.join(fields)}",
            code="PRV004",
            status_code=422,
            details={"fields": fields},
        )


class MalformedWorkHistoryError(ProviderResponseError):
    """Positions response does not have the expected nested structure."""

    def __init__(self, errors: list[str]):
        super().__init__(
            message="Work history response is malformed",
            code="PRV005",
            status_code=502,
            details={"errors": errors},
        )
