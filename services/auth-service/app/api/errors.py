"""
Auth Service — Exception handlers

Every error body has the shape {"detail": "<message>"}.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.exceptions import AuthServiceError

logger = logging.getLogger(__name__)


async def auth_service_error_handler(request: Request, exc: AuthServiceError):
    if exc.status_code >= 500:
        logger.error("HTTP %d on %s: %s", exc.status_code, request.url.path, exc.message)
    else:
        logger.info("HTTP %d on %s: %s", exc.status_code, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and path parameters are reported as 400."""
    errors = jsonable_errors(exc)
    logger.info("Validation error on %s: %s", request.url.path, errors)
    return JSONResponse(status_code=400, content={"detail": "Invalid request", "errors": errors})


async def general_exception_handler(request: Request, exc: Exception):
    logger.error("Unexpected error on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # Drop the raw input and ctx, which can hold passwords or non-JSON values.
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthServiceError, auth_service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
