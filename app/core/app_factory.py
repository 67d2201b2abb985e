"""Application factory for the FastAPI app.

Collaborators are passed in (or built from settings) and stored on
``app.state``; routes reach them only through dependencies, so tests can
substitute in-memory fakes without patching modules.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.adapters.identity.base import AbstractIdentityResolver
from app.adapters.identity.factory import create_identity_resolver
from app.adapters.store.base import AbstractStoreProvider
from app.adapters.store.factory import create_store_provider
from app.api.routes import (
    follow_router,
    health_router,
    leaderboard_router,
    profile_router,
    reviews_router,
)
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import cors_middleware, request_id_middleware
from app.core.openapi import apply_openapi_customizations

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Close pooled collaborator connections on shutdown."""
    logger.info(
        "app.startup",
        extra={"env": settings.app_env, "backend": settings.app.backend},
    )
    yield
    await app.state.store_provider.aclose()
    await app.state.identity_resolver.aclose()
    logger.info("app.shutdown")


def create_app(
    *,
    store_provider: AbstractStoreProvider | None = None,
    identity_resolver: AbstractIdentityResolver | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        store_provider: Store provider; built from settings when omitted.
        identity_resolver: Identity resolver; built from settings when omitted.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Cafe Social API",
        description=(
            "Authenticated mutations for the cafe discovery app: follow/unfollow "
            "users and create or update one review per cafe (bearer token required, "
            "reviews limited per user over a rolling hour); read leaderboards "
            "and public profiles."
        ),
        version="0.1.0",
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
        lifespan=lifespan,
    )

    app.state.store_provider = store_provider or create_store_provider()
    app.state.identity_resolver = identity_resolver or create_identity_resolver()

    # Middleware (last registered runs first)
    app.middleware("http")(cors_middleware)
    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(follow_router)
    app.include_router(reviews_router)
    app.include_router(leaderboard_router)
    app.include_router(profile_router)
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
