"""
Shared fixtures: a throwaway SQLite database per test, an AuthService bound
to it, and an httpx client talking to the FastAPI app in-process.
"""
import uuid

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import func, select

from app.core.config import Settings, get_settings
from app.db.database import create_engine_from_settings, create_session_factory, init_models
from app.main import app
from app.services.auth_service import AuthService
from app.services.side_writes import SideWriter


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}",
        JWT_SECRET_KEY="test-access-secret",
        JWT_REFRESH_SECRET_KEY="test-refresh-secret",
        BCRYPT_ROUNDS=4,
        METRICS_ENABLED=False,
    )


@pytest_asyncio.fixture
async def engine(settings):
    engine = create_engine_from_settings(settings)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def side_writer(engine, settings):
    """Background writer shared by the service and the app; drained before the engine closes."""
    writer = SideWriter(settings.SIDE_WRITE_TIMEOUT_SECONDS)
    yield writer
    await writer.drain()


@pytest.fixture
def service(session_factory, settings, side_writer) -> AuthService:
    return AuthService(session_factory, settings, side_writer=side_writer)


@pytest_asyncio.fixture
async def client(engine, session_factory, settings, side_writer):
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.side_writer = side_writer
    app.dependency_overrides[get_settings] = lambda: settings
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def count_rows(session_factory):
    """count_rows(Model) -> number of rows currently in Model's table."""
    async def _count(model) -> int:
        async with session_factory() as db:
            result = await db.execute(select(func.count()).select_from(model))
            return result.scalar_one()
    return _count


def make_registration(**overrides) -> dict:
    unique = uuid.uuid4().hex[:8]
    data = {
        "student_id": f"STU-{unique}",
        "username": f"user_{unique}",
        "email": f"user_{unique}@iut.edu.bd",
        "password": "TestPass123!",
        "role": "student",
    }
    data.update(overrides)
    return data


@pytest.fixture
def registration():
    """registration(**overrides) -> a fresh, non-colliding register payload."""
    return make_registration
