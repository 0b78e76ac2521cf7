from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from profitpulse.models.admin import AdminRole


class LoginIn(BaseModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("username is required")
        return cleaned

    model_config = ConfigDict(
        json_schema_extra={"example": {"username": "admin", "password": "password123"}}
    )


class AdminProfileOut(BaseModel):
    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    role: AdminRole
    created_at: datetime | None = None


class LoginOut(BaseModel):
    token: str
    admin: AdminProfileOut


class ForgotPasswordIn(BaseModel):
    email: EmailStr


class ResetPasswordIn(BaseModel):
    token: str
    password: str

    @field_validator("token")
    @classmethod
    def validate_token(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("token is required")
        return cleaned

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        if len(value) < 8:
            raise ValueError("password must be at least 8 characters")
        return value
