"""
Auth Service — User and profile queries
"""
from datetime import datetime
from typing import Any

from sqlalchemy import select, func, or_
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User, UserProfile

# Profile columns that keep their stored value when the update leaves them out.
MERGED_PROFILE_FIELDS = ("first_name", "last_name", "address", "contact_number", "birthdate")


async def find_conflicting_user(
    db: AsyncSession, student_id: str, username: str, email: str
) -> str | None:
    """Return the id of any user holding one of the three natural keys."""
    result = await db.execute(
        select(User.user_id)
        .where(
            or_(
                User.student_id == student_id,
                User.username == username,
                User.email == email,
            )
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def insert_user(
    db: AsyncSession,
    *,
    user_id: str,
    student_id: str,
    username: str,
    email: str,
    password_hash: str,
    role: str,
    now: datetime,
) -> User:
    """
    Insert a new user and commit. A unique-constraint violation from a
    concurrent registration surfaces as sqlalchemy IntegrityError.
    """
    user = User(
        user_id=user_id,
        student_id=student_id,
        username=username,
        email=email,
        password_hash=password_hash,
        role=role,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    result = await db.execute(select(User).where(User.user_id == user_id))
    return result.scalar_one_or_none()


async def user_exists(db: AsyncSession, user_id: str) -> bool:
    result = await db.execute(select(User.user_id).where(User.user_id == user_id))
    return result.scalar_one_or_none() is not None


async def get_user_with_profile(db: AsyncSession, user_id: str) -> dict[str, Any] | None:
    """
    Public user fields LEFT OUTER JOINed with the profile; profile columns are
    None when the user has never saved a profile.
    """
    result = await db.execute(
        select(
            User.user_id,
            User.student_id,
            User.username,
            User.email,
            User.role,
            User.created_at,
            User.updated_at,
            UserProfile.first_name,
            UserProfile.last_name,
            UserProfile.address,
            UserProfile.contact_number,
            UserProfile.birthdate,
            UserProfile.tuition_beneficiary_status,
        )
        .outerjoin(UserProfile, UserProfile.user_id == User.user_id)
        .where(User.user_id == user_id)
    )
    row = result.mappings().one_or_none()
    return dict(row) if row is not None else None


def _dialect_insert(db: AsyncSession):
    if db.get_bind().dialect.name == "postgresql":
        return pg_insert
    return sqlite_insert


async def upsert_profile(
    db: AsyncSession,
    user_id: str,
    fields: dict[str, Any],
    tuition_beneficiary_status: bool,
) -> UserProfile:
    """
    Insert the profile or merge into the existing one, in one statement.

    On conflict every column in MERGED_PROFILE_FIELDS becomes
    COALESCE(incoming, stored), while tuition_beneficiary_status always takes
    the incoming value.
    """
    insert = _dialect_insert(db)
    values = {name: fields.get(name) for name in MERGED_PROFILE_FIELDS}
    stmt = insert(UserProfile).values(
        user_id=user_id,
        tuition_beneficiary_status=tuition_beneficiary_status,
        **values,
    )

    set_: dict[str, Any] = {
        name: func.coalesce(getattr(stmt.excluded, name), getattr(UserProfile, name))
        for name in MERGED_PROFILE_FIELDS
    }
    set_["tuition_beneficiary_status"] = stmt.excluded.tuition_beneficiary_status

    stmt = stmt.on_conflict_do_update(index_elements=["user_id"], set_=set_).returning(UserProfile)
    result = await db.scalars(stmt, execution_options={"populate_existing": True})
    profile = result.one()
    await db.commit()
    return profile
