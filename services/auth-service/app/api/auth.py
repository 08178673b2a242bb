"""
Auth Service — Auth API routes
"""
from fastapi import APIRouter, Depends, Request, status

from app.api.deps import client_ip, get_auth_service
from app.core.exceptions import NotImplementedFeatureError
from app.schemas.auth import (
    FailedLoginRequest,
    FailedLoginResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PasswordForgotRequest,
    PasswordForgotResponse,
    PasswordResetRequest,
    PasswordResetResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    UserResponse,
)
from app.schemas.user import ProfileUpdateRequest, ProfileUpdateResponse, UserDetailResponse
from app.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])

_NOT_IMPLEMENTED = {status.HTTP_501_NOT_IMPLEMENTED: {"model": MessageResponse}}


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    """Create an account. 409 if the student ID, username or email is taken."""
    return await service.register(payload)


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
):
    """Check credentials and issue an access/refresh token pair."""
    return await service.login(payload, ip_address=client_ip(request))


@router.post("/logout", response_model=MessageResponse)
async def logout():
    return MessageResponse(message="Logout successful")


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(payload: RefreshRequest, service: AuthService = Depends(get_auth_service)):
    """Issue a new access token from a refresh token handed out at login."""
    return await service.refresh(payload)


@router.post("/password/forgot", response_model=PasswordForgotResponse, responses=_NOT_IMPLEMENTED)
async def password_forgot(payload: PasswordForgotRequest):
    raise NotImplementedFeatureError("Password reset is not available yet.")


@router.post("/password/reset", response_model=PasswordResetResponse, responses=_NOT_IMPLEMENTED)
async def password_reset(payload: PasswordResetRequest):
    raise NotImplementedFeatureError("Password reset is not available yet.")


@router.post("/failed-login", response_model=FailedLoginResponse)
async def failed_login(payload: FailedLoginRequest, service: AuthService = Depends(get_auth_service)):
    """Manually append a failed-login audit record."""
    return await service.record_failed_login(payload)


@router.get("/user/{user_id}", response_model=UserDetailResponse)
async def get_user(user_id: str, service: AuthService = Depends(get_auth_service)):
    return await service.get_user(user_id)


@router.put("/user/{user_id}", response_model=ProfileUpdateResponse)
async def update_user(
    user_id: str,
    payload: ProfileUpdateRequest | None = None,
    service: AuthService = Depends(get_auth_service),
):
    """Create or merge the user's profile. An empty body still resets the tuition flag."""
    return await service.update_profile(user_id, payload or ProfileUpdateRequest())
