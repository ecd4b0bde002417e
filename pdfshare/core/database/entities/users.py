"""
User entity models.

A user signs up with e-mail and password, verifies the address through a
one-time token, and then authenticates with JWTs. The hash of the current
refresh token is stored so that refresh tokens can be rotated and revoked.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class UserBase(Base):
    """Base fields for a user."""

    email: str = Field(max_length=320, unique=True, index=True, description="Lowercased e-mail address")
    name: str = Field(default="", max_length=255, description="Display name")


class User(UserBase, table=True):
    """Registered account.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    password_hash: Optional[str] = Field(default=None, description="bcrypt hash; empty for Google-only accounts")
    google_id: Optional[str] = Field(default=None, max_length=255, description="Google account subject id")
    is_email_verified: bool = Field(default=False)
    verification_token: Optional[str] = Field(default=None, max_length=64, index=True)
    refresh_token_hash: Optional[str] = Field(default=None, description="bcrypt hash of the latest refresh token")

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email})"
