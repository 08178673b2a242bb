"""
Auth Service — Token introspection
"""
from fastapi import APIRouter, Depends

from app.api.deps import get_auth_service
from app.schemas.auth import TokenValidationResponse
from app.services.auth_service import AuthService

router = APIRouter(prefix="/user", tags=["tokens"])


@router.get("/validate-token/{token}", response_model=TokenValidationResponse)
async def validate_token(token: str, service: AuthService = Depends(get_auth_service)):
    """Verify an access token's signature and expiry and return its claims. 401 otherwise."""
    return service.validate_access_token(token)
