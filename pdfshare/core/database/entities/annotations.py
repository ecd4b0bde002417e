"""
Annotation entity models.

Besides the document-level XFDF stored on the file, the viewer can persist
individual annotation commands, one row per annotation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, Text
from sqlmodel import Field

from ..base import Base, utc_now


class Annotation(Base, table=True):
    """Single annotation authored by a user.

    Table: annotations
    """

    __tablename__ = "annotations"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    file_id: int = Field(foreign_key="files.id", index=True)
    creator_id: int = Field(foreign_key="users.id")
    creator_email: str = Field(max_length=320)
    xml: str = Field(sa_column=Column(Text, nullable=False))

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Annotation(id={self.id}, file_id={self.file_id}, creator={self.creator_email})"
