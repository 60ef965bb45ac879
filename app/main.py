"""
Mailroom - Main FastAPI Application

Entry point for the application. Builds the storage context and auth
components, installs middleware and mounts all module routers.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from app.core.config import Settings, settings as default_settings
from app.core.database import Database
from app.core.exceptions import register_exception_handlers
from app.core.health import get_health_metrics
from app.core.middleware import (
    add_security_headers,
    configure_csrf,
    configure_rate_limiting,
)
from app.core.security import PasswordHasher, TokenService
from app.core.sentry import init_sentry
from app.modules.auth.resolvers import IdentityResolver
from app.modules.auth.routes import router as auth_router
from app.modules.mail.routes import router as mail_router

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build a Mailroom application.

    Args:
        settings: Configuration to use (defaults to the environment settings)

    Returns:
        Configured FastAPI app; its state holds the database, password
        hasher, token service and identity resolver
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan events.

        Runs on startup and shutdown.
        """
        logging.basicConfig(
            level=settings.LOG_LEVEL.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})")

        init_sentry(settings, release=f"mailroom@{VERSION}")

        if settings.DB_CREATE_TABLES:
            await app.state.database.create_tables()

        yield

        logger.info("Shutting down...")
        await app.state.database.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Demo authentication and mailbox API",
        version=VERSION,
        docs_url="/docs" if settings.DEBUG else None,  # Disable docs in production
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # Storage context and auth components
    tokens = TokenService.from_settings(settings)
    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.password_hasher = PasswordHasher.from_settings(settings)
    app.state.token_service = tokens
    app.state.identity_resolver = IdentityResolver.from_settings(settings, tokens)

    register_exception_handlers(app)

    # Middleware added last runs first:
    # CORS -> security headers -> CSRF -> session -> routes
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET_KEY,
        max_age=settings.session_max_age_seconds,
        same_site="lax",
        https_only=settings.is_production,
        session_cookie="session",
    )
    configure_csrf(app, settings)
    configure_rate_limiting(app)
    add_security_headers(app, settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(mail_router)

    @app.get("/health")
    async def health_check(request: Request):
        """
        Health check endpoint for monitoring.

        Used by Docker and load balancers.
        """
        metrics = await get_health_metrics(request.app.state.database)
        return {
            "service": settings.APP_NAME,
            "version": VERSION,
            "environment": settings.ENVIRONMENT,
            **metrics,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.DEBUG,
    )
