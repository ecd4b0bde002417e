"""
Shareable link entity models.

A link carries a random token and a role. Anyone holding an enabled,
unexpired token can open the file with that role.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class ShareableLink(Base, table=True):
    """Role-scoped access token for a file.

    Table: shareable_links
    """

    __tablename__ = "shareable_links"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    file_id: int = Field(foreign_key="files.id", index=True)
    role: str = Field(max_length=16, description="editor or viewer")
    token: str = Field(max_length=64, unique=True, index=True)
    enabled: bool = Field(default=True)
    created_by: Optional[int] = Field(default=None, foreign_key="users.id")
    expires_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    def is_active(self, now: datetime) -> bool:
        return self.enabled and not self.is_expired(now)

    def __repr__(self) -> str:
        return f"ShareableLink(id={self.id}, file_id={self.file_id}, role={self.role}, enabled={self.enabled})"
