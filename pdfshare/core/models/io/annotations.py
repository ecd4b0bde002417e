"""
Annotation I/O models.

The document-level XFDF is what the viewer loads and saves in one piece;
individual annotation records hold one XML command each.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class XfdfRead(CamelModel):
    id: int
    file: int
    xfdf: str
    version: int
    created_at: datetime
    updated_at: datetime


class XfdfSave(CamelModel):
    """Schema for saving the document XFDF.

    When ``version`` is given it must match the stored version.
    """

    xfdf: str = Field(min_length=1)
    version: Optional[int] = Field(default=None, ge=0)


class AnnotationRead(CamelModel):
    id: int
    file_id: int
    creator: str
    xml: str
    created_at: datetime
    updated_at: datetime


class AnnotationWrite(CamelModel):
    xml: str = Field(min_length=1)
