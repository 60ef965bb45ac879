"""
Authentication service - registration, login and user lookup.

Session cookies are handled by the routes (they need the request); this
module owns the credential store and token issuing.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    DuplicateEmail,
    DuplicateResource,
    DuplicateUsername,
    InvalidCredentials,
)
from app.core.security import PasswordHasher, TokenService, sanitize_email_for_logging
from app.models.user import User

logger = logging.getLogger(__name__)


class AuthService:
    """
    Credential store operations for one request.

    Usage:
        auth = AuthService(db, hasher, tokens)
        user, token = await auth.register("alyx", "alyx@example.com", "s3cret-pass")
        user, token = await auth.login("alyx", "s3cret-pass")
    """

    def __init__(self, db: AsyncSession, hasher: PasswordHasher, tokens: TokenService):
        self.db = db
        self.hasher = hasher
        self.tokens = tokens

    async def get_user_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    def issue_token(self, user: User) -> str:
        return self.tokens.create_token(user.id, user.username)

    async def _duplicate_error(self, username: str, email: str) -> DuplicateResource:
        if await self.get_user_by_username(username):
            return DuplicateUsername()
        if await self.get_user_by_email(email):
            return DuplicateEmail()
        return DuplicateResource("Username or email already exists")

    async def register(self, username: str, email: str, password: str) -> Tuple[User, str]:
        """
        Create a user account.

        Raises:
            DuplicateUsername: username taken
            DuplicateEmail: email taken

        Returns:
            (user, identity token)
        """
        if await self.get_user_by_username(username):
            raise DuplicateUsername()
        if await self.get_user_by_email(email):
            raise DuplicateEmail()

        user = User(
            username=username,
            email=email,
            password_hash=await self.hasher.hash(password),
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration; the unique
            # constraints decided the winner
            await self.db.rollback()
            logger.info(
                "Registration rejected by unique constraint",
                extra={"username": username, "email": sanitize_email_for_logging(email)},
            )
            raise await self._duplicate_error(username, email)

        logger.info(
            f"User registered: id={user.id}",
            extra={"user_id": user.id, "email": sanitize_email_for_logging(email)},
        )
        return user, self.issue_token(user)

    async def login(self, username: str, password: str) -> Tuple[User, str]:
        """
        Check a username/password pair.

        An unknown username still costs one hash verification, so response
        time does not tell callers which usernames exist.

        Raises:
            InvalidCredentials: unknown username or wrong password
        """
        user = await self.get_user_by_username(username)
        password_ok = await self.hasher.verify(
            password, user.password_hash if user else None
        )
        if user is None or not password_ok:
            logger.info("Failed login attempt", extra={"username": username})
            raise InvalidCredentials()

        logger.info(f"User logged in: id={user.id}", extra={"user_id": user.id})
        return user, self.issue_token(user)
