"""
File I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from pdfshare.core.models.domain import FileRole

from .base import CamelModel


class FileRead(CamelModel):
    """Schema for an uploaded file record."""

    id: int
    name: str
    content_type: str
    size_bytes: int
    owner_email: str
    version: int
    created_at: datetime
    updated_at: datetime


class FileListItem(CamelModel):
    """One row of the paginated file list."""

    id: int
    name: str
    owner: str
    role: FileRole
    updated_at: datetime


class TotalFilesResponse(CamelModel):
    total_files: int


class OwnerInfo(BaseModel):
    email: str
    name: str


class FileInfo(CamelModel):
    """Metadata of a file with its member e-mails."""

    id: int
    name: str
    created_at: datetime
    updated_at: datetime
    owner: OwnerInfo
    viewers: List[str]
    editors: List[str]


class FileUser(BaseModel):
    """A person with access to a file; ``id`` is None for people not yet registered."""

    id: Optional[int] = None
    email: str
    role: FileRole
    name: str


class UserRoleResponse(BaseModel):
    role: FileRole


class DownloadWithAnnotations(CamelModel):
    file_id: int
    file_name: str
    download_url: str
    annotations: str
    has_annotations: bool
    version: int
