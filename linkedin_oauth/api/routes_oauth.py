"""
LinkedIn OAuth 2.0 Routes.

Endpoints:
- GET  /auth/linkedin/login - Initiate OAuth flow (302 to LinkedIn)
- GET  /auth/linkedin/callback - Handle OAuth callback, return access token
- GET  /auth/linkedin/me - Normalized profile for a bearer access token
- GET  /auth/linkedin/me/positions - Normalized work history for a bearer access token

Only handles the HTTP layer; the flow itself lives in OAuthClient.
Failures raised by the client are mapped to responses by the registered
error handlers.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from linkedin_oauth.api.dependencies import get_access_token, get_oauth_client
from linkedin_oauth.core.exceptions import AuthorizationDeniedError, MissingAuthorizationCodeError
from linkedin_oauth.models import schemas
from linkedin_oauth.services.oauth import OAuthClient

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth/linkedin", tags=["oauth"])


@router.get("/login")
async def oauth_login(client: Annotated[OAuthClient, Depends(get_oauth_client)]) -> RedirectResponse:
    """
    Initiate OAuth login flow.

    Issues a single-use state token and redirects the user agent to
    LinkedIn's authorization page.
    """
    auth_url = client.start_auth()
    return RedirectResponse(url=auth_url, status_code=302)


@router.get("/callback", response_model=schemas.AccessTokenOut)
async def oauth_callback(
    client: Annotated[OAuthClient, Depends(get_oauth_client)],
    code: str | None = Query(None, description="Authorization code from LinkedIn"),
    state: str = Query("", description="CSRF protection token"),
    error: str | None = Query(None, description="Error reported by LinkedIn"),
    error_description: str | None = Query(None),
) -> dict:
    """
    Handle LinkedIn's redirect back to the application.

    Example:
        GET /auth/linkedin/callback?code=AQT...&state=Xy7...
    """
    if error:
        # The attempt is over either way; burn its state so it cannot be replayed
        client.state_store.validate_and_consume(state)
        logger.info(f"LinkedIn authorization declined: {error}")
        raise AuthorizationDeniedError(error, error_description)

    if not code:
        raise MissingAuthorizationCodeError()

    access_token = await client.complete_auth(code, state)
    logger.info("LinkedIn OAuth authentication successful")
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/me", response_model=schemas.UserProfile)
async def get_profile(
    client: Annotated[OAuthClient, Depends(get_oauth_client)],
    access_token: Annotated[str, Depends(get_access_token)],
) -> schemas.UserProfile:
    return await client.get_user(access_token)


@router.get("/me/positions", response_model=list[schemas.Position])
async def get_positions(
    client: Annotated[OAuthClient, Depends(get_oauth_client)],
    access_token: Annotated[str, Depends(get_access_token)],
) -> list[schemas.Position]:
    return await client.get_work_history(access_token)
