"""
Auth Service — Pydantic schemas for user profiles
"""
from datetime import date, datetime
from pydantic import BaseModel, Field, field_validator


class ProfileUpdateRequest(BaseModel):
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    address: str | None = Field(default=None, max_length=255)
    contact_number: str | None = Field(default=None, max_length=32)
    birthdate: date | None = None
    tuition_beneficiary_status: bool | None = None

    @field_validator("first_name", "last_name", "address", "contact_number", "birthdate", mode="before")
    @classmethod
    def blank_is_absent(cls, value):
        # An empty string leaves the stored value alone, same as omitting the field.
        if isinstance(value, str) and not value.strip():
            return None
        return value


class UserProfileResponse(BaseModel):
    user_id: str
    first_name: str | None
    last_name: str | None
    address: str | None
    contact_number: str | None
    birthdate: date | None
    tuition_beneficiary_status: bool

    model_config = {"from_attributes": True}


class ProfileUpdateResponse(BaseModel):
    message: str
    data: UserProfileResponse


class UserDetailResponse(BaseModel):
    """User public fields plus profile fields (None when no profile exists)."""
    user_id: str
    student_id: str
    username: str
    email: str
    role: str
    created_at: datetime
    updated_at: datetime
    first_name: str | None = None
    last_name: str | None = None
    address: str | None = None
    contact_number: str | None = None
    birthdate: date | None = None
    tuition_beneficiary_status: bool | None = None
