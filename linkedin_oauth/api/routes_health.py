from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from linkedin_oauth.api.dependencies import get_oauth_client
from linkedin_oauth.models import schemas
from linkedin_oauth.services.oauth import OAuthClient

router = APIRouter(tags=["health"])


@router.get("/healthz", response_model=schemas.HealthOut)
async def healthz(client: Annotated[OAuthClient, Depends(get_oauth_client)]) -> dict:
    """Basic liveness probe (cheap, no provider calls)."""
    return {"status": "ok", "oauth_configured": client.is_initialized}
