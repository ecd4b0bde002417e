"""
Sharing I/O models: invitations, role changes and shareable links.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from pdfshare.core.models.domain import FileRole, MemberRole, RoleAssignment

from .base import CamelModel


class InviteRequest(CamelModel):
    """Invite one or more people to a file.

    Either ``emails`` or the single ``email`` must be given.
    """

    file_id: str
    emails: List[EmailStr] = Field(default_factory=list)
    email: Optional[EmailStr] = None
    role: MemberRole

    @model_validator(mode="after")
    def _collect(self) -> "InviteRequest":
        if self.email is not None:
            self.emails = [*self.emails, self.email]
        if not self.emails:
            raise ValueError("At least one email is required")
        return self

    def normalized_emails(self) -> List[str]:
        """Trimmed, lowercased, de-duplicated, in request order."""
        seen: dict[str, None] = {}
        for email in self.emails:
            seen.setdefault(str(email).strip().lower(), None)
        return list(seen)


class RoleChange(CamelModel):
    email: EmailStr
    role: RoleAssignment

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value: str) -> str:
        return value.strip().lower() if isinstance(value, str) else value


class ChangeRoleRequest(RoleChange):
    file_id: str


class ChangeRolesRequest(CamelModel):
    file_id: str
    changes: List[RoleChange] = Field(min_length=1)


class CreateShareableLinkRequest(CamelModel):
    file_id: str
    role: MemberRole
    expires_at: Optional[datetime] = None


class ToggleShareableLinkRequest(CamelModel):
    file_id: str
    enabled: bool


class ToggleShareableLinkResponse(CamelModel):
    message: str
    updated: int


class ShareableLinkRead(CamelModel):
    id: int
    file_id: int
    role: MemberRole
    token: str
    enabled: bool
    url: str
    created_at: datetime
    expires_at: Optional[datetime] = None


class AccessViaLinkRequest(CamelModel):
    token: str = Field(min_length=1)


class LinkAccessResponse(CamelModel):
    file_id: int
    file_name: str
    role: FileRole
