"""
Security utilities for password hashing, JWT identity tokens, and log hygiene.

CRITICAL SECURITY REQUIREMENTS:
1. NEVER log passwords, password hashes or tokens
2. ALWAYS compare password hashes in constant time
3. NEVER return password_hash to clients
"""

import hmac
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError
from nacl.pwhash import argon2id
from nacl.utils import random as random_bytes
from starlette.concurrency import run_in_threadpool

from app.core.config import Settings

SALT_BYTES = argon2id.SALTBYTES  # 16
HASH_BYTES = 64


class PasswordHasher:
    """
    Salted Argon2id password hashing.

    Stored format is "<hash hex>.<salt hex>": a 64-byte Argon2id derivation of
    the password under a random per-user salt, followed by that salt.

    Argon2id is memory-hard, so both hashing and checking are slow on purpose.
    The async methods run them in the thread pool so the event loop keeps
    serving other requests.

    Usage:
        hasher = PasswordHasher.from_settings(settings)
        stored = await hasher.hash("correct horse")
        ok = await hasher.verify("correct horse", stored)
    """

    def __init__(self, opslimit: int, memlimit: int):
        self.opslimit = opslimit
        self.memlimit = memlimit
        # Verified against when a username does not exist, so a failed
        # login costs the same whether or not the user is real
        self._dummy_hash = self.hash_sync("mailroom-dummy-password")

    @classmethod
    def from_settings(cls, settings: Settings) -> "PasswordHasher":
        return cls(
            opslimit=settings.PASSWORD_HASH_OPSLIMIT,
            memlimit=settings.PASSWORD_HASH_MEMLIMIT,
        )

    def _derive(self, password: str, salt: bytes) -> bytes:
        return argon2id.kdf(
            HASH_BYTES,
            password.encode("utf-8"),
            salt,
            opslimit=self.opslimit,
            memlimit=self.memlimit,
        )

    def hash_sync(self, password: str) -> str:
        """Hash `password` under a fresh random salt."""
        salt = random_bytes(SALT_BYTES)
        return f"{self._derive(password, salt).hex()}.{salt.hex()}"

    def verify_sync(self, password: str, stored: str) -> bool:
        """
        Check `password` against a stored "<hash>.<salt>" string.

        Malformed stored values never match.
        """
        try:
            hashed_hex, salt_hex = stored.split(".")
            expected = bytes.fromhex(hashed_hex)
            salt = bytes.fromhex(salt_hex)
        except (AttributeError, ValueError):
            return False
        if len(salt) != SALT_BYTES or len(expected) != HASH_BYTES:
            return False
        return hmac.compare_digest(expected, self._derive(password, salt))

    def burn_sync(self, password: str) -> bool:
        """Spend one verification on the dummy hash. Always False."""
        self.verify_sync(password, self._dummy_hash)
        return False

    async def hash(self, password: str) -> str:
        return await run_in_threadpool(self.hash_sync, password)

    async def verify(self, password: str, stored: Optional[str]) -> bool:
        if stored is None:
            return await run_in_threadpool(self.burn_sync, password)
        return await run_in_threadpool(self.verify_sync, password, stored)


class TokenService:
    """
    Signed, expiring identity tokens (JWT, HS256 by default).

    Claims: {"id": <user id>, "username": <username>, "iat": ..., "exp": ...}

    Usage:
        tokens = TokenService.from_settings(settings)
        token = tokens.create_token(user.id, user.username)
        claims = tokens.verify_token(token)  # None if invalid or expired
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_hours: int = 24):
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.expires_hours = expires_hours

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret_key=settings.SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            expires_hours=settings.JWT_EXPIRE_HOURS,
        )

    def create_token(
        self,
        user_id: int,
        username: str,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create an identity token for a user.

        Args:
            user_id: User primary key
            username: Username, embedded for client convenience
            expires_delta: Override the configured lifetime

        Returns:
            JWT token string
        """
        now = datetime.utcnow()
        payload = {
            "id": user_id,
            "username": username,
            "iat": now,
            "exp": now + (expires_delta or timedelta(hours=self.expires_hours)),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Optional[dict]:
        """
        Verify signature and expiry, and decode the token.

        Returns:
            Decoded payload dict if valid, None if invalid/expired/malformed
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={"require_exp": True},
            )
        except JWTError:
            return None
        if not isinstance(payload.get("id"), int):
            return None
        return payload


# Log helpers

def sanitize_email_for_logging(email_address: Optional[str]) -> str:
    """
    Mask an email address for logs.

    e.g., "sebastian@example.com" -> "seb***@example.com"
    """
    if email_address and "@" in email_address:
        local, domain = email_address.split("@", 1)
        masked_local = local[:3] + "***" if len(local) > 3 else "***"
        return f"{masked_local}@{domain}"
    return "***@unknown"
