"""
Auth Service — Request-scoped dependencies
"""
from fastapi import Depends, Request

from app.core.config import Settings, get_settings
from app.services.auth_service import AuthService


def get_auth_service(request: Request, settings: Settings = Depends(get_settings)) -> AuthService:
    """Build an AuthService around the session factory and side writer created at startup."""
    return AuthService(
        request.app.state.session_factory,
        settings,
        side_writer=request.app.state.side_writer,
    )


def client_ip(request: Request) -> str | None:
    """Caller address, falling back to the first X-Forwarded-For hop."""
    if request.client and request.client.host:
        return request.client.host
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return None
