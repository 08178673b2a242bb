"""
Auth Service — Async engine and session factory

The engine is built once in the application lifespan and handed to the
AuthService through app.state; nothing here holds a live connection at
import time.
"""
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.core.config import Settings

# Query parameters libpq understands but asyncpg rejects.
_STRIPPED_QUERY_KEYS = ("channel_binding",)
_SSL_MODES = {"require", "verify-ca", "verify-full", "prefer", "allow", "disable"}


class Base(DeclarativeBase):
    pass


def clean_database_url(url: str) -> tuple[str, dict[str, Any]]:
    """
    Normalise a PostgreSQL connection string for SQLAlchemy + asyncpg.

    Returns the cleaned URL and the connect_args to pass to the engine:
      - postgres:// and postgresql:// become postgresql+asyncpg://
      - channel_binding is dropped
      - sslmode is dropped from the URL and passed as asyncpg's `ssl` argument
    Non-PostgreSQL URLs (e.g. sqlite+aiosqlite in tests) are returned untouched.
    """
    parsed = make_url(url)
    if not parsed.drivername.startswith("postgres"):
        return url, {}

    if parsed.drivername in ("postgres", "postgresql"):
        parsed = parsed.set(drivername="postgresql+asyncpg")

    connect_args: dict[str, Any] = {}
    sslmode = parsed.query.get("sslmode")
    if isinstance(sslmode, tuple):
        sslmode = sslmode[-1]
    if sslmode in _SSL_MODES:
        connect_args["ssl"] = sslmode

    parsed = parsed.difference_update_query([*_STRIPPED_QUERY_KEYS, "sslmode"])
    return parsed.render_as_string(hide_password=False), connect_args


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    url, connect_args = clean_database_url(settings.database_url)
    kwargs: dict[str, Any] = {"echo": settings.DB_ECHO, "connect_args": connect_args}
    if url.startswith("postgresql"):
        kwargs["pool_pre_ping"] = True
    return create_async_engine(url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_models(engine: AsyncEngine) -> None:
    """Create any missing tables."""
    # Importing the model modules registers their tables on Base.metadata
    import app.models.user  # noqa: F401
    import app.models.audit  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
