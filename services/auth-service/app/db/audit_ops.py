"""
Auth Service — Failed-login and refresh-token writes
"""
import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit import AuthTokenRecord, FailedLoginAttempt


async def insert_failed_login(
    db: AsyncSession,
    user_id: str | None,
    attempt_time: datetime,
    ip_address: str | None,
) -> FailedLoginAttempt:
    attempt = FailedLoginAttempt(
        id=str(uuid.uuid4()),
        user_id=user_id,
        attempt_time=attempt_time,
        ip_address=ip_address,
    )
    db.add(attempt)
    await db.commit()
    return attempt


async def insert_refresh_token(
    db: AsyncSession,
    user_id: str,
    token: str,
    expires_at: datetime,
    now: datetime,
) -> AuthTokenRecord:
    record = AuthTokenRecord(
        token_id=str(uuid.uuid4()),
        user_id=user_id,
        token=token,
        expires_at=expires_at,
        created_at=now,
    )
    db.add(record)
    await db.commit()
    return record


async def find_active_refresh_token(
    db: AsyncSession, user_id: str, token: str, now: datetime
) -> AuthTokenRecord | None:
    result = await db.execute(
        select(AuthTokenRecord)
        .where(
            AuthTokenRecord.user_id == user_id,
            AuthTokenRecord.token == token,
            AuthTokenRecord.expires_at > now,
        )
        .limit(1)
    )
    return result.scalar_one_or_none()
