"""
Authentication I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .base import CamelModel


def _normalize_email(value: str) -> str:
    return value.strip().lower()


class RegisterRequest(BaseModel):
    """Schema for signing up with e-mail and password."""

    email: EmailStr = Field(description="Account e-mail; trimmed and lowercased")
    password: str = Field(min_length=8, max_length=128)
    name: str = Field(min_length=2, max_length=255, description="Display name")

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value: str) -> str:
        return _normalize_email(value) if isinstance(value, str) else value

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: str) -> str:
        return value.strip() if isinstance(value, str) else value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value: str) -> str:
        return _normalize_email(value) if isinstance(value, str) else value


class ResendVerificationRequest(BaseModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value: str) -> str:
        return _normalize_email(value) if isinstance(value, str) else value


class RefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class RegisterResponse(CamelModel):
    email: str
    name: str
    is_email_verified: bool


class TokenResponse(CamelModel):
    """Returned by login and refresh."""

    message: str
    access_token: str
    refresh_token: str


class MeResponse(CamelModel):
    email: str
    name: str
    is_email_verified: bool


class UserPublic(CamelModel):
    """Public view of a user record."""

    id: int
    email: str
    name: str
    is_email_verified: bool
    has_google_account: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None
