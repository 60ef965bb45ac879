"""
Credential resolvers: turn an incoming request into a User.

Each resolver inspects one kind of credential and returns the user it
proves, or None. IdentityResolver asks them in order; the first user found
wins. The default order is bearer token first, then session cookie.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from app.core.config import Settings
from app.core.exceptions import Unauthenticated
from app.core.security import TokenService
from app.core.session import clear_session, get_session_user_id, is_session_expired
from app.models.user import User

logger = logging.getLogger(__name__)


class CredentialResolver:
    """Strategy interface for one authentication mechanism."""

    name = "credential"

    async def resolve(self, request: Request, db: AsyncSession) -> Optional[User]:
        raise NotImplementedError


class BearerTokenResolver(CredentialResolver):
    """`Authorization: Bearer <jwt>` - signature and expiry checked, then user looked up."""

    name = "bearer"

    def __init__(self, tokens: TokenService):
        self.tokens = tokens

    @staticmethod
    def extract_token(request: Request) -> Optional[str]:
        header = request.headers.get("Authorization")
        if not header:
            return None
        scheme, _, token = header.partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            return None
        return token

    async def resolve(self, request: Request, db: AsyncSession) -> Optional[User]:
        token = self.extract_token(request)
        if token is None:
            return None

        claims = self.tokens.verify_token(token)
        if claims is None:
            logger.info("Rejected invalid or expired bearer token")
            return None

        user = await db.get(User, claims["id"])
        if user is None:
            logger.info(f"Bearer token for unknown user id={claims['id']}")
        return user


class SessionResolver(CredentialResolver):
    """Signed session cookie carrying `user_id`."""

    name = "session"

    def __init__(self, max_age_hours: int = 24):
        self.max_age_hours = max_age_hours

    async def resolve(self, request: Request, db: AsyncSession) -> Optional[User]:
        user_id = get_session_user_id(request)
        if user_id is None:
            return None

        if is_session_expired(request, max_age_hours=self.max_age_hours):
            clear_session(request)
            return None

        user = await db.get(User, user_id)
        if user is None:
            # Stale session for a user that no longer resolves
            clear_session(request)
        return user


class IdentityResolver:
    """
    Ordered chain of credential resolvers.

    Usage:
        resolver = IdentityResolver.from_settings(settings, tokens)
        user = await resolver.require(request, db)  # raises Unauthenticated
    """

    def __init__(self, resolvers: Sequence[CredentialResolver]):
        self.resolvers = list(resolvers)

    @classmethod
    def from_settings(cls, settings: Settings, tokens: TokenService) -> "IdentityResolver":
        return cls([
            BearerTokenResolver(tokens),
            SessionResolver(max_age_hours=settings.SESSION_MAX_AGE_HOURS),
        ])

    async def resolve(self, request: Request, db: AsyncSession) -> Optional[User]:
        for resolver in self.resolvers:
            user = await resolver.resolve(request, db)
            if user is not None:
                request.state.auth_method = resolver.name
                return user
        return None

    async def require(self, request: Request, db: AsyncSession) -> User:
        user = await self.resolve(request, db)
        if user is None:
            raise Unauthenticated()
        return user
