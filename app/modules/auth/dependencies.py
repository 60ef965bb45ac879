"""Authentication dependencies for API routes.

Provides get_current_user for protecting routes, plus accessors for the
auth components the application factory stores on app.state.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import PasswordHasher, TokenService
from app.models.user import User
from app.modules.auth.resolvers import IdentityResolver
from app.modules.auth.service import AuthService


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_identity_resolver(request: Request) -> IdentityResolver:
    return request.app.state.identity_resolver


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(db, hasher, tokens)


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> User:
    """
    FastAPI dependency to get the currently authenticated user.

    Tries a bearer token first, then the session cookie.

    Raises:
        Unauthenticated: 401 if neither yields a user

    Usage:
        @router.get("/api/user")
        async def current_user(user: User = Depends(get_current_user)):
            return user
    """
    return await resolver.require(request, db)
