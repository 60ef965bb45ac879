"""Security middleware for the API.

This module provides CSRF protection, rate limiting, and security headers.
"""

import re
from typing import Callable

from fastapi import FastAPI, Request, Response
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware
from starlette_csrf import CSRFMiddleware

from app.core.config import Settings, settings

# Route decorators need the limiter at import time, so it is built from the
# module-level settings. configure_rate_limiting() attaches it to an app.
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    def __init__(self, app, is_production: bool = False):
        super().__init__(app)
        self.is_production = is_production

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Add security headers to the response."""
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = (
            "geolocation=(), microphone=(), camera=()"
        )

        # HSTS - only in production (requires HTTPS)
        if self.is_production:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        # JSON API: nothing here should ever be rendered or framed
        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; frame-ancestors 'none'"
        )
        response.headers["Cache-Control"] = "no-store"

        return response


def configure_csrf(app: FastAPI, settings: Settings) -> None:
    """
    Configure CSRF protection middleware (double-submit cookie).

    Only unsafe requests that carry the session cookie are checked, so
    bearer-token clients never need a CSRF token.

    Args:
        app: The FastAPI application instance
        settings: Application settings
    """
    app.add_middleware(
        CSRFMiddleware,
        secret=settings.SECRET_KEY,
        sensitive_cookies={"session"},
        cookie_name="csrf_token",
        cookie_path="/",
        cookie_domain=None,
        cookie_secure=settings.is_production,
        cookie_httponly=False,  # The SPA reads it to fill the header
        cookie_samesite="lax",
        header_name="X-CSRF-Token",
        exempt_urls=[
            re.compile(r"^/health$"),
        ],
    )


def configure_rate_limiting(app: FastAPI) -> Limiter:
    """
    Attach the shared limiter to an application.

    Args:
        app: The FastAPI application instance

    Returns:
        The configured Limiter instance for use in route decorators
    """
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    return limiter


def add_security_headers(app: FastAPI, settings: Settings) -> None:
    """
    Add security headers middleware to the application.

    Args:
        app: The FastAPI application instance
        settings: Application settings
    """
    app.add_middleware(SecurityHeadersMiddleware, is_production=settings.is_production)
