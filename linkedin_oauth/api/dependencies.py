from __future__ import annotations

from fastapi import Header, HTTPException, Request, status

from linkedin_oauth.services.oauth import OAuthClient


def get_oauth_client(request: Request) -> OAuthClient:
    """Return the OAuth client created at application startup."""
    return request.app.state.oauth_client


def get_access_token(authorization: str | None = Header(None)) -> str:
    """Extract the LinkedIn access token from an ``Authorization: Bearer`` header."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer access token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token = authorization[7:].strip()
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer access token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token
