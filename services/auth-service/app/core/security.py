"""
Auth Service — Password hashing and JWT issuing
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import Settings


# ─── Password Hashing ─────────────────────────────────────────────────────────

class PasswordHasher:
    """bcrypt via passlib. The hash string carries its own salt and cost."""

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds
        )

    def hash(self, plain: str) -> str:
        return self._context.hash(plain)

    def verify(self, plain: str, hashed: str) -> bool:
        return self._context.verify(plain, hashed)


# ─── JWT Token Generation ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    issued_at: datetime
    access_expires_at: datetime
    refresh_expires_at: datetime


class TokenIssuer:
    """
    Signs access tokens ({user_id, role}) and refresh tokens ({user_id}).
    The two token kinds use separate secrets, so one can never be passed off
    as the other.
    """

    def __init__(self, settings: Settings):
        self._access_secret = settings.JWT_SECRET_KEY
        self._refresh_secret = settings.JWT_REFRESH_SECRET_KEY
        self._algorithm = settings.JWT_ALGORITHM
        self.access_lifetime = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
        self.refresh_lifetime = timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS)

    def create_access_token(self, user_id: str, role: str, now: datetime | None = None) -> str:
        now = now or datetime.now(tz=timezone.utc)
        payload = {"user_id": user_id, "role": role, "exp": now + self.access_lifetime}
        return jwt.encode(payload, self._access_secret, algorithm=self._algorithm)

    def create_refresh_token(self, user_id: str, now: datetime | None = None) -> str:
        now = now or datetime.now(tz=timezone.utc)
        payload = {"user_id": user_id, "exp": now + self.refresh_lifetime}
        return jwt.encode(payload, self._refresh_secret, algorithm=self._algorithm)

    def issue_pair(self, user_id: str, role: str, now: datetime | None = None) -> TokenPair:
        now = now or datetime.now(tz=timezone.utc)
        return TokenPair(
            access_token=self.create_access_token(user_id, role, now),
            refresh_token=self.create_refresh_token(user_id, now),
            issued_at=now,
            access_expires_at=now + self.access_lifetime,
            refresh_expires_at=now + self.refresh_lifetime,
        )

    def decode_access_token(self, token: str) -> dict[str, Any]:
        """Decode and validate an access token. Raises JWTError on failure."""
        return self._decode(token, self._access_secret)

    def decode_refresh_token(self, token: str) -> dict[str, Any]:
        """Decode and validate a refresh token. Raises JWTError on failure."""
        return self._decode(token, self._refresh_secret)

    def _decode(self, token: str, secret: str) -> dict[str, Any]:
        claims = jwt.decode(
            token, secret, algorithms=[self._algorithm], options={"require_exp": True}
        )
        if not claims.get("user_id"):
            raise JWTError("Token is missing the user_id claim")
        return claims
