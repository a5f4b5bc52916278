from contextlib import asynccontextmanager

from fastapi import FastAPI

from linkedin_oauth.api.routes_health import router as health_router
from linkedin_oauth.api.routes_oauth import router as oauth_router
from linkedin_oauth.core.config import settings
from linkedin_oauth.core.errors import register_error_handlers
from linkedin_oauth.core.logger import init_logging
from linkedin_oauth.core.redis_client import close_redis_client
from linkedin_oauth.services.oauth import OAuthClient, create_oauth_client


@asynccontextmanager
async def _lifespan(app: FastAPI):
    yield
    close_redis_client()


def create_app(oauth_client: OAuthClient | None = None) -> FastAPI:
    init_logging()

    is_production = settings.ENV.lower() == "prod"
    app = FastAPI(
        title=settings.APP_NAME,
        debug=False,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
        lifespan=_lifespan,
    )
    app.state.oauth_client = oauth_client or create_oauth_client()
    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(oauth_router)
    return app


app = create_app()
