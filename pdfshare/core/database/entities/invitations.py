"""
Invitation entity models.

Created when a file is shared with an e-mail that has no account yet; the
token is embedded in the sign-up link of the invitation mail.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class Invitation(Base, table=True):
    """Pending invitation for an unregistered e-mail.

    Table: invitations
    """

    __tablename__ = "invitations"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    file_id: int = Field(foreign_key="files.id", index=True)
    email: str = Field(max_length=320, index=True)
    role: str = Field(max_length=16)
    token: str = Field(max_length=64, unique=True)
    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Invitation(file_id={self.file_id}, email={self.email}, role={self.role})"
