"""
Auth Service — Credential and token lifecycle

AuthService owns registration, login, profile upsert, failed-login auditing
and token refresh/introspection. It is given its store handle (an async
session factory) and settings at construction; each call opens its own
session.
"""
import asyncio
import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from jose import JWTError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import Settings
from app.core.exceptions import (
    ConflictError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from app.core.security import PasswordHasher, TokenIssuer, TokenPair
from app.db import audit_ops, user_ops
from app.models.audit import FailedLoginAttempt
from app.schemas.auth import (
    FailedLoginRequest,
    FailedLoginResponse,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    TokenValidationResponse,
    UserResponse,
)
from app.schemas.user import (
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    UserDetailResponse,
    UserProfileResponse,
)
from app.services.side_writes import SideWriter

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


_NIL_AND_MAX_UUIDS = frozenset({str(uuid.UUID(int=0)), str(uuid.UUID(int=(1 << 128) - 1))})


def parse_user_id(value: Any) -> str | None:
    """
    Return the canonical lowercase UUID string, or None if `value` is not one.
    Accepts RFC 4122 variant UUIDs of versions 1-8, plus the nil and max UUIDs.
    """
    if not isinstance(value, str):
        return None
    try:
        parsed = uuid.UUID(value)
    except ValueError:
        return None
    canonical = str(parsed)
    if canonical != value.lower():
        return None
    if canonical in _NIL_AND_MAX_UUIDS:
        return canonical
    if parsed.variant != uuid.RFC_4122 or not 1 <= (parsed.version or 0) <= 8:
        return None
    return canonical


@contextmanager
def _store_errors(operation: str):
    """Log store failures and re-raise them as a generic InternalError."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("%s failed", operation)
        raise InternalError() from exc


class AuthService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
        hasher: PasswordHasher | None = None,
        issuer: TokenIssuer | None = None,
        side_writer: SideWriter | None = None,
    ):
        self._session_factory = session_factory
        self._settings = settings
        self._hasher = hasher or PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
        self._issuer = issuer or TokenIssuer(settings)
        self._side_writer = side_writer or SideWriter(settings.SIDE_WRITE_TIMEOUT_SECONDS)

    # ── Registration ─────────────────────────────────────────────────────────

    async def register(self, payload: RegisterRequest) -> UserResponse:
        if any(
            _is_blank(v)
            for v in (payload.student_id, payload.username, payload.email, payload.password, payload.role)
        ):
            raise ValidationError("student_id, username, email, password, and role are required")

        now = _utcnow()
        with _store_errors("Register"):
            async with self._session_factory() as db:
                existing = await user_ops.find_conflicting_user(
                    db, payload.student_id, payload.username, payload.email
                )
                if existing is not None:
                    raise ConflictError()

                password_hash = await asyncio.to_thread(self._hasher.hash, payload.password)
                try:
                    user = await user_ops.insert_user(
                        db,
                        user_id=str(uuid.uuid4()),
                        student_id=payload.student_id,
                        username=payload.username,
                        email=payload.email,
                        password_hash=password_hash,
                        role=payload.role,
                        now=now,
                    )
                except IntegrityError:
                    # Lost a race with a concurrent registration for the same keys.
                    await db.rollback()
                    logger.info("Register rejected by unique constraint: username=%s", payload.username)
                    raise ConflictError() from None

        logger.info("User registered: user_id=%s role=%s", user.user_id, user.role)
        return UserResponse.model_validate(user)

    # ── Login ────────────────────────────────────────────────────────────────

    async def login(self, payload: LoginRequest, ip_address: str | None = None) -> LoginResponse:
        if _is_blank(payload.email) or _is_blank(payload.password):
            raise ValidationError("Email and password are required")

        now = _utcnow()
        with _store_errors("Login lookup"):
            async with self._session_factory() as db:
                user = await user_ops.get_user_by_email(db, payload.email)

        if user is None:
            raise NotFoundError("User not found")

        valid = await asyncio.to_thread(self._hasher.verify, payload.password, user.password_hash)
        if not valid:
            self._side_writer.submit(
                "record failed login",
                self._write_failed_login(user.user_id, now, ip_address),
            )
            raise UnauthorizedError("Incorrect password")

        tokens = self._issuer.issue_pair(user.user_id, user.role, now)
        self._side_writer.submit("save refresh token", self._write_refresh_token(user.user_id, tokens))

        logger.info("Login succeeded: user_id=%s", user.user_id)
        return LoginResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_at=tokens.access_expires_at,
            user_id=user.user_id,
            role=user.role,
        )

    async def refresh(self, payload: RefreshRequest) -> RefreshResponse:
        """Exchange a persisted, unexpired refresh token for a new access token."""
        if _is_blank(payload.refresh_token):
            raise ValidationError("refresh_token is required")

        try:
            claims = self._issuer.decode_refresh_token(payload.refresh_token)
        except JWTError:
            raise UnauthorizedError("Invalid or expired refresh token")

        now = _utcnow()
        with _store_errors("Refresh"):
            async with self._session_factory() as db:
                record = await audit_ops.find_active_refresh_token(
                    db, claims["user_id"], payload.refresh_token, now
                )
                user = await user_ops.get_user_by_id(db, claims["user_id"]) if record else None

        if record is None:
            raise UnauthorizedError("Refresh token not recognised")
        if user is None:
            raise UnauthorizedError("User not found")

        return RefreshResponse(
            access_token=self._issuer.create_access_token(user.user_id, user.role, now),
            expires_at=now + self._issuer.access_lifetime,
            user_id=user.user_id,
            role=user.role,
        )

    def validate_access_token(self, token: str) -> TokenValidationResponse:
        try:
            claims = self._issuer.decode_access_token(token)
        except JWTError:
            raise UnauthorizedError("Invalid or expired token")

        return TokenValidationResponse(
            valid=True,
            user_id=claims["user_id"],
            role=claims.get("role"),
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )

    # ── Failed-login audit ───────────────────────────────────────────────────

    async def record_failed_login(self, payload: FailedLoginRequest) -> FailedLoginResponse:
        """
        Store one failed-login row. A user reference that is not a UUID is
        stored as NULL rather than rejected; attempt_time defaults to now.
        """
        attempt_time = payload.attempt_time or _utcnow()
        with _store_errors("Record failed login"):
            attempt = await self._write_failed_login(
                parse_user_id(payload.user_id), attempt_time, payload.ip_address
            )
        return FailedLoginResponse.model_validate(attempt)

    async def _write_failed_login(
        self, user_id: str | None, attempt_time: datetime, ip_address: str | None
    ) -> FailedLoginAttempt:
        async with self._session_factory() as db:
            return await audit_ops.insert_failed_login(db, user_id, attempt_time, ip_address)

    async def _write_refresh_token(self, user_id: str, tokens: TokenPair) -> None:
        async with self._session_factory() as db:
            await audit_ops.insert_refresh_token(
                db, user_id, tokens.refresh_token, tokens.refresh_expires_at, tokens.issued_at
            )

    # ── Profiles ─────────────────────────────────────────────────────────────

    async def get_user(self, user_id: str) -> UserDetailResponse:
        canonical_id = parse_user_id(user_id)
        if canonical_id is None:
            raise ValidationError("Invalid user ID (must be UUID).")

        with _store_errors("Get user"):
            async with self._session_factory() as db:
                row = await user_ops.get_user_with_profile(db, canonical_id)

        if row is None:
            raise NotFoundError("User not found.")
        return UserDetailResponse(**row)

    async def update_profile(self, user_id: str, payload: ProfileUpdateRequest) -> ProfileUpdateResponse:
        """
        Create the profile or merge into it. Omitted text/date fields keep
        their stored value; tuition_beneficiary_status is always replaced
        (omitted means False).
        """
        canonical_id = parse_user_id(user_id)
        if canonical_id is None:
            raise ValidationError("Valid user_id (UUID) is required in URL.")

        fields = payload.model_dump(include=set(user_ops.MERGED_PROFILE_FIELDS))
        flag = bool(payload.tuition_beneficiary_status)

        with _store_errors("Update profile"):
            async with self._session_factory() as db:
                if not await user_ops.user_exists(db, canonical_id):
                    raise NotFoundError("User not found.")
                profile = await user_ops.upsert_profile(db, canonical_id, fields, flag)

        return ProfileUpdateResponse(
            message="Profile updated successfully.",
            data=UserProfileResponse.model_validate(profile),
        )
