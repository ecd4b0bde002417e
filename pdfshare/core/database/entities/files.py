"""
File entity models.

A file row holds the document metadata, the key of the stored PDF and the
document-level XFDF annotations together with a version counter. Access for
people other than the owner lives in ``file_members``, keyed by e-mail so
that people can be invited before they register.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, Text, UniqueConstraint
from sqlmodel import Field

from pdfshare.server.core.constant import DEFAULT_XFDF

from ..base import Base, utc_now


class FileBase(Base):
    """Base fields for an uploaded file."""

    name: str = Field(max_length=512, description="Original file name")
    content_type: str = Field(default="application/pdf", max_length=128)
    size_bytes: int = Field(default=0, ge=0)


class File(FileBase, table=True):
    """Uploaded PDF document.

    Table: files
    """

    __tablename__ = "files"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    storage_key: str = Field(max_length=1024, description="Key of the document in the storage backend")
    owner_id: int = Field(foreign_key="users.id", index=True)
    owner_email: str = Field(max_length=320, index=True)

    xfdf: str = Field(default=DEFAULT_XFDF, sa_column=Column(Text, nullable=False))
    version: int = Field(default=0, ge=0, description="Incremented on every annotation save")

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, index=True)

    @property
    def has_annotations(self) -> bool:
        return bool(self.xfdf) and self.xfdf != DEFAULT_XFDF

    def __repr__(self) -> str:
        return f"File(id={self.id}, name={self.name}, owner={self.owner_email})"


class FileMember(Base, table=True):
    """Editor or viewer of a file.

    Table: file_members
    """

    __tablename__ = "file_members"
    __table_args__ = (
        UniqueConstraint("file_id", "email", name="uq_file_members_file_email"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    file_id: int = Field(foreign_key="files.id", index=True)
    email: str = Field(max_length=320, index=True)
    role: str = Field(max_length=16, description="editor or viewer")
    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"FileMember(file_id={self.file_id}, email={self.email}, role={self.role})"
