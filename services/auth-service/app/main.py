"""
Auth Service — FastAPI application entrypoint
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from app.core.config import get_settings
from app.core.logging_config import configure_logging
from app.db.database import create_engine_from_settings, create_session_factory, init_models
from app.api import auth, health, tokens
from app.api.errors import register_exception_handlers
from app.services.side_writes import SideWriter

settings = get_settings()
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: one engine per process, shared through app.state
    engine = create_engine_from_settings(settings)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.side_writer = SideWriter(settings.SIDE_WRITE_TIMEOUT_SECONDS)
    try:
        await init_models(engine)
        logger.info("Connected to database")
    except Exception:
        # Keep serving; /health reports the database as degraded.
        logger.exception("Database initialisation failed")
    yield
    # Shutdown: let in-flight audit writes finish before closing the pool
    await app.state.side_writer.drain()
    await engine.dispose()


app = FastAPI(
    title="Auth Service",
    description="Registration, login and JWT issuing for student accounts.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Errors ────────────────────────────────────────────────────────────────────
register_exception_handlers(app)

# ── Prometheus Metrics ────────────────────────────────────────────────────────
if settings.METRICS_ENABLED:
    Instrumentator().instrument(app).expose(app, endpoint="/metrics")

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(auth.router)
app.include_router(tokens.router)
app.include_router(health.router)


@app.get("/")
async def root():
    return {"service": settings.SERVICE_NAME, "version": settings.SERVICE_VERSION}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)
