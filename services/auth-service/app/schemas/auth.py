"""
Auth Service — Pydantic schemas for the /auth endpoints

Request fields are optional at the schema level: AuthService decides which
are required so that a missing field is reported as a 400, not a 422.
"""
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    student_id: str | None = Field(default=None, max_length=64, examples=["STU-2021-001"])
    username: str | None = Field(default=None, max_length=64)
    email: EmailStr | None = None
    password: str | None = Field(default=None, max_length=128)
    role: str | None = Field(default=None, max_length=32, examples=["student"])


class UserResponse(BaseModel):
    user_id: str
    student_id: str
    username: str
    email: str
    role: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class LoginRequest(BaseModel):
    email: EmailStr | None = None
    password: str | None = None


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user_id: str
    role: str


class RefreshRequest(BaseModel):
    refresh_token: str | None = None


class RefreshResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user_id: str
    role: str


class FailedLoginRequest(BaseModel):
    # Kept as a free-form string: anything that is not a UUID is stored as NULL.
    user_id: str | None = None
    attempt_time: datetime | None = None
    ip_address: str | None = Field(default=None, max_length=64)


class FailedLoginResponse(BaseModel):
    id: str
    user_id: str | None
    attempt_time: datetime
    ip_address: str | None

    model_config = {"from_attributes": True}


class TokenValidationResponse(BaseModel):
    valid: bool
    user_id: str
    role: str | None
    expires_at: datetime


class MessageResponse(BaseModel):
    message: str


class PasswordForgotRequest(BaseModel):
    email: EmailStr


class PasswordForgotResponse(BaseModel):
    message: str
    reset_token: str
    expires_at: datetime


class PasswordResetRequest(BaseModel):
    user_id: str
    reset_token: str
    new_password: str = Field(..., min_length=6, max_length=128)


class PasswordResetResponse(BaseModel):
    reset_id: str
    user_id: str
    reset_token: str
    expires_at: datetime
    created_at: datetime


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    dependencies: dict[str, str]
