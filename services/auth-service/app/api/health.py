"""
Auth Service — Health endpoint
"""
import asyncio
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.core.config import get_settings
from app.schemas.auth import HealthResponse

settings = get_settings()
router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Deep health check — verifies database connectivity.
    Returns 200 if the database answers, 503 otherwise.
    """
    deps: dict[str, str] = {}
    healthy = True

    try:
        engine = request.app.state.engine
        async with engine.connect() as conn:
            await asyncio.wait_for(conn.execute(text("SELECT 1")), timeout=settings.HEALTH_CHECK_TIMEOUT)
        deps["database"] = "ok"
    except Exception as e:
        deps["database"] = f"error: {str(e)[:100]}"
        healthy = False

    response = HealthResponse(
        status="healthy" if healthy else "degraded",
        service=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
        dependencies=deps,
    )

    return JSONResponse(
        content=response.model_dump(),
        status_code=200 if healthy else 503,
    )
