from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dormtrack.api.v1.router import router as api_v1_router
from dormtrack.config.logging import get_logger, setup_logging
from dormtrack.config.settings import Settings, get_settings
from dormtrack.core.middleware import register_exception_handlers, register_middlewares
from dormtrack.core.security import IdentityResolver, JWTIdentityResolver
from dormtrack.db.init_db import init_db
from dormtrack.db.session import Database

logger = get_logger(__name__)


def create_app(
    config: Optional[Settings] = None,
    database: Optional[Database] = None,
    identity_resolver: Optional[IdentityResolver] = None,
) -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Builds the primary/secondary ``Database`` unless one is supplied, and
      disposes it on shutdown.
    - Registers CORS, core middleware and exception handlers.
    - Includes the versioned API router under ``API_V1_STR``.
    """
    config = config or get_settings()
    setup_logging(config)

    app = FastAPI(
        title=config.APP_NAME,
        debug=config.DEBUG,
        version=config.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.state.settings = config
    app.state.database = database or Database.from_settings(config)
    app.state.identity_resolver = identity_resolver or JWTIdentityResolver(
        config.JWT_SECRET_KEY, config.JWT_ALGORITHM,
    )

    allow_all = not config.CORS_ORIGINS or config.CORS_ORIGINS == ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else config.CORS_ORIGINS,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middlewares(app)
    register_exception_handlers(app)

    app.include_router(api_v1_router, prefix=config.API_V1_STR)

    @app.get("/health", tags=["Health"])
    def health() -> dict:
        db: Database = app.state.database
        return {
            "status": "ok",
            "environment": config.ENVIRONMENT,
            "secondary_store": db.has_secondary,
        }

    @app.on_event("startup")
    async def on_startup() -> None:
        if not config.is_production():
            # Development and tests only; production schemas are migrated.
            init_db(app.state.database.primary_engine)
        logger.info("%s started (%s)", config.APP_NAME, config.ENVIRONMENT)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        app.state.database.dispose()

    return app


app = create_app()
